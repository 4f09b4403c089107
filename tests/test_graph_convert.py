"""
Tests for graph conversion layer.

Tests topology/report -> NetworkX conversion, cycle discovery, and
NetworkX -> layout input.
"""

from __future__ import annotations

import networkx as nx
import pytest

from flowlog_profiler.layout.graph_convert import (
    find_cycle,
    networkx_to_layout_nodes,
    report_to_networkx,
    topology_to_networkx,
)
from flowlog_profiler.ops.builder import NodeGraphBuilder
from flowlog_profiler.view.report import build_report


@pytest.fixture
def diamond_graph(diamond_ops):
    return NodeGraphBuilder().build_from_spec(diamond_ops)


class TestFindCycle:
    def test_acyclic(self):
        assert find_cycle({"a": ["b", "c"], "b": ["c"]}) is None

    def test_cycle_closed_on_start(self):
        cycle = find_cycle({"a": ["b"], "b": ["c"], "c": ["a"]})
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {"a", "b", "c"}

    def test_self_loop(self):
        assert find_cycle({"a": ["a"]}) == ["a", "a"]


class TestTopologyToNetworkX:
    def test_basic_conversion(self, diamond_graph):
        G = topology_to_networkx(diamond_graph)
        assert len(G.nodes) == 4
        assert len(G.edges) == 4
        assert ("2", "4") in G.edges
        assert nx.is_directed_acyclic_graph(G)

    def test_node_attributes_preserved(self, diamond_graph):
        G = topology_to_networkx(diamond_graph)
        assert G.nodes["4"]["label"] == "Join"
        assert G.nodes["4"]["tags"] == ["join"]
        assert G.nodes["4"]["operators"] == 2


class TestReportToNetworkX:
    def test_tree_edges_marked(self, diamond_ops, diamond_log):
        report = build_report(diamond_ops, diamond_log).report
        G = report_to_networkx(report)
        assert G.edges["2", "4"]["tree"] is True
        assert G.edges["3", "4"]["tree"] is False

    def test_graph_metadata(self, diamond_ops, diamond_log):
        report = build_report(diamond_ops, diamond_log).report
        G = report_to_networkx(report)
        assert G.graph["roots"] == ["1"]
        assert G.graph["total_mapped_ms"] == pytest.approx(18.75)


class TestNetworkXToLayoutNodes:
    def test_roundtrip(self, diamond_ops, diamond_log):
        report = build_report(diamond_ops, diamond_log).report
        nodes = networkx_to_layout_nodes(report_to_networkx(report))
        assert nodes["1"].children == ("2", "3")
        assert nodes["4"].weight == pytest.approx(10.0)

    def test_defaults(self):
        G = nx.DiGraph()
        G.add_edge(1, 2)
        nodes = networkx_to_layout_nodes(G)
        assert nodes["1"].label == "1"
        assert nodes["1"].children == ("2",)
        assert nodes["2"].weight == 0.0
