"""Tests for per-rule plan views."""

from __future__ import annotations

from flowlog_profiler.diagnostics import UNKNOWN_FINGERPRINT, Diagnostics
from flowlog_profiler.ops.parser import RulePlanNode, RuleSpec
from flowlog_profiler.view.rules import RuleViewBuilder


def diamond_rule() -> RuleSpec:
    return RuleSpec(
        text="q(x) :- p(x).",
        root="a",
        nodes={
            "a": RulePlanNode(children=["b", "c"]),
            "b": RulePlanNode(children=["d"]),
            "c": RulePlanNode(children=["d"]),
            "d": RulePlanNode(),
        },
    )


class TestRuleViewBuilder:
    def test_shared_node(self):
        view = RuleViewBuilder({}, {}).build_rule(diamond_rule())
        assert view.shared_nodes() == ["d"]
        assert view.nodes["d"].parents == ["b", "c"]
        assert view.nodes["a"].parents == []
        assert view.root == "a"

    def test_fingerprints_resolve_to_nodes(self):
        view = RuleViewBuilder(
            labels={"7": "Join"},
            fingerprint_to_node={"d": "7"},
        ).build_rule(diamond_rule())
        assert view.nodes["d"].node == "7"
        assert view.nodes["d"].label == "Join"

    def test_unknown_fingerprint_warns(self):
        diagnostics = Diagnostics()
        view = RuleViewBuilder({}, {"a": "1"}, diagnostics).build_rule(diamond_rule(), index=3)
        assert view.nodes["b"].node is None
        assert view.nodes["b"].label is None
        issues = diagnostics.by_code(UNKNOWN_FINGERPRINT)
        assert len(issues) == 3
        assert all(i.location == "rule:3" for i in issues)

    def test_shared_is_local_to_rule(self):
        rule = RuleSpec(text="r", root="a", nodes={"a": RulePlanNode(children=["b"]), "b": RulePlanNode()})
        view = RuleViewBuilder({}, {}).build_rule(rule)
        assert view.shared_nodes() == []

    def test_to_dict(self):
        d = RuleViewBuilder({}, {}).build_rule(diamond_rule()).to_dict()
        assert d["root"] == "a"
        assert d["nodes"]["d"]["shared"] is True
        assert d["nodes"]["a"]["children"] == ["b", "c"]
