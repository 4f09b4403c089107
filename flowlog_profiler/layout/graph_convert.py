"""
Graph Conversion Layer.

Converts between profiler structures and NetworkX graphs, and provides the
cycle check used when validating a topology.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Mapping

import networkx as nx

if TYPE_CHECKING:
    from flowlog_profiler.layout.layered import LayoutNode
    from flowlog_profiler.ops.builder import NodeGraph
    from flowlog_profiler.view.report import ReportData

logger = logging.getLogger(__name__)


def children_to_networkx(children: Mapping[str, Iterable[str]]) -> nx.DiGraph:
    """Build a bare DiGraph from a parent -> children adjacency map."""
    G = nx.DiGraph()
    for parent, kids in children.items():
        G.add_node(parent)
        for child in kids:
            G.add_edge(parent, child)
    return G


def find_cycle(children: Mapping[str, Iterable[str]]) -> list[str] | None:
    """Return the nodes of one directed cycle, or None if the graph is acyclic.

    The returned list starts and ends with the same node.
    """
    G = children_to_networkx(children)
    try:
        edges = nx.find_cycle(G, orientation="original")
    except nx.NetworkXNoCycle:
        return None
    path = [u for u, _v, *_ in edges]
    path.append(path[0])
    return path


def topology_to_networkx(graph: "NodeGraph") -> nx.DiGraph:
    """Convert a validated NodeGraph to a NetworkX DiGraph with node metadata."""
    G = nx.DiGraph()
    for name, spec in graph.nodes.items():
        G.add_node(
            name,
            label=spec.label,
            block=spec.block,
            tags=list(spec.tags),
            fingerprint=spec.fingerprint,
            operators=len(spec.operators),
        )
    for parent, child in graph.edges():
        G.add_edge(parent, child)
    return G


def report_to_networkx(report: "ReportData") -> nx.DiGraph:
    """Convert a report to a NetworkX DiGraph over its DAG edges.

    Edges that are part of the drill-down spanning tree carry ``tree=True``.
    """
    G = nx.DiGraph()
    for name, node in report.nodes.items():
        G.add_node(
            name,
            label=node.label,
            self_activations=node.self_activations,
            self_total_active_ms=node.self_total_active_ms,
        )
    for name, node in report.nodes.items():
        tree_children = set(node.children)
        for child in node.dag_children or node.children:
            if child in report.nodes:
                G.add_edge(name, child, tree=child in tree_children)

    # Store report-level attributes
    G.graph["roots"] = list(report.roots)
    G.graph["total_mapped_ms"] = report.totals.total_mapped_ms
    return G


def networkx_to_layout_nodes(G: nx.DiGraph) -> dict[str, "LayoutNode"]:
    """Convert a NetworkX DiGraph to layout input.

    Node order follows ``G.nodes`` and child order follows ``G.successors``.
    Missing attributes fall back to the node id as label and zero weight.
    """
    from flowlog_profiler.layout.layered import LayoutNode

    nodes = {}
    for node_id, attrs in G.nodes(data=True):
        name = str(node_id)
        nodes[name] = LayoutNode(
            name=name,
            label=str(attrs.get("label", name)),
            children=tuple(str(c) for c in G.successors(node_id)),
            weight=float(attrs.get("self_total_active_ms", 0.0) or 0.0),
        )
    return nodes
