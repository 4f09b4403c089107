"""End-to-end tests for report assembly."""

from __future__ import annotations

import json

import pytest

from flowlog_profiler.diagnostics import ADDR_NOT_IN_LOG
from flowlog_profiler.errors import AddressOwnershipConflictError, LogError
from flowlog_profiler.log import LogRow
from flowlog_profiler.addr import Addr
from flowlog_profiler.ops.builder import NodeGraphBuilder
from flowlog_profiler.ops.parser import RulePlanNode, RuleSpec, parse_ops_data
from flowlog_profiler.view.report import build_report, build_report_data


@pytest.fixture
def built(diamond_ops, diamond_log):
    return build_report(diamond_ops, diamond_log)


class TestDiamondReport:
    def test_roots_and_tree(self, built):
        report = built.report
        assert report.roots == ("1",)
        assert report.nodes["1"].children == ("2", "3")
        assert report.nodes["2"].children == ("4",)
        assert report.nodes["3"].children == ()

    def test_dag_metadata(self, built):
        join = built.report.nodes["4"]
        assert join.dag_parents == ("2", "3")
        assert join.extra_parents == ("3",)
        assert built.report.nodes["1"].dag_children == ("2", "3")
        assert built.report.nodes["3"].dag_children == ("4",)

    def test_node_metadata(self, built):
        join = built.report.nodes["4"]
        assert join.label == "Join"
        assert join.tags == ("join",)
        assert join.block == "b1"
        assert built.report.nodes["2"].fingerprint == "fp-map"

    def test_self_metrics(self, built):
        nodes = built.report.nodes
        assert nodes["1"].self_total_active_ms == pytest.approx(5.5)
        assert nodes["4"].self_activations == 7
        assert built.report.totals.total_mapped_ms == pytest.approx(18.75)

    def test_rules(self, built):
        (rule,) = built.report.rules
        assert rule.nodes["fp-map"].node == "2"
        assert rule.nodes["fp-map"].label == "Map"
        assert rule.nodes["3"].label == "Filter"

    def test_missing_addr_is_only_a_diagnostic(self, built):
        assert [i.code for i in built.diagnostics.warnings()] == [ADDR_NOT_IN_LOG]
        assert "ADDR_NOT_IN_LOG" not in built.report.to_json()

    def test_graph_kept(self, built):
        assert len(built.graph) == 4


class TestSerialization:
    def test_byte_identical(self, diamond_ops, diamond_log):
        first = build_report(diamond_ops, diamond_log).report.to_json()
        second = build_report(diamond_ops, diamond_log).report.to_json()
        assert first == second

    def test_sorted_keys(self, built):
        data = json.loads(built.report.to_json())
        assert list(data) == ["nodes", "roots", "rules", "totals"]
        assert list(data["nodes"]["4"]) == sorted(data["nodes"]["4"])

    def test_operator_addr_as_list(self, built):
        data = json.loads(built.report.to_json(indent=2))
        assert data["nodes"]["4"]["operators"][0]["addr"] == [0, 4]


class TestFailures:
    def test_ownership_conflict(self, diamond_log):
        spec = parse_ops_data({"input": [
            {"id": 1, "label": "a", "operators": [{"addr": [0, 1]}]},
            {"id": 2, "label": "b", "operators": [{"addr": [0, 1]}]},
        ]})
        with pytest.raises(AddressOwnershipConflictError):
            build_report(spec, diamond_log)

    def test_strict_log_rejects_bad_index(self, diamond_ops):
        row = LogRow(addr=Addr((0, 1)), activations=1, total_active_ms=1.0, op_name="x")
        with pytest.raises(LogError):
            build_report(diamond_ops, {Addr((9,)): row})

    def test_lenient_log_skips_validation(self, diamond_ops):
        row = LogRow(addr=Addr((0, 1)), activations=1, total_active_ms=1.0, op_name="x")
        built = build_report(diamond_ops, {Addr((9,)): row}, strict_log=False)
        assert built.report.totals.operators_mapped == 0


class TestBuildReportData:
    def test_explicit_rules_and_mapping(self, diamond_ops, diamond_log):
        graph = NodeGraphBuilder().build_from_spec(diamond_ops)
        rule = RuleSpec(text="t", root="x", nodes={"x": RulePlanNode(children=["y"]), "y": RulePlanNode()})
        report = build_report_data(graph, diamond_log, [rule], {"x": "1", "y": "4"})
        (view,) = report.rules
        assert view.nodes["y"].label == "Join"
        assert view.nodes["x"].children == ["y"]
