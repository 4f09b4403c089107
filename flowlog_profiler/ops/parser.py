"""
Ops Spec Parser.

The ops spec describes both the UI topology and the operator mapping. It
provides several buckets of node records::

    input
    strata[*].enter
    strata[*].rules[*].stages
    strata[*].runtime
    strata[*].leave
    inspect

Buckets carry no semantics of their own; ``OpsSpec.all_nodes()`` concatenates
them in the order above. Rule records additionally describe a small local DAG
keyed by fingerprint, either explicitly (``plan``) or derived from the rule's
stages.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from flowlog_profiler.addr import Addr
from flowlog_profiler.errors import OpsSpecError


@dataclass
class RawNode:
    """Node record as it appears in an ops spec bucket."""

    id: int
    label: str
    children: list[int] = field(default_factory=list)
    operators: list[Addr] = field(default_factory=list)
    parents: list[int] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    block: str = ""
    fingerprint: str | None = None

    @property
    def name(self) -> str:
        return str(self.id)


@dataclass
class RulePlanNode:
    """One node of a rule's local DAG."""

    children: list[str] = field(default_factory=list)


@dataclass
class RuleSpec:
    """A rule's local DAG, keyed by fingerprint."""

    text: str
    root: str
    nodes: dict[str, RulePlanNode] = field(default_factory=dict)


@dataclass
class RawRule:
    text: str
    stages: list[RawNode] = field(default_factory=list)
    plan: RuleSpec | None = None

    def to_rule_spec(self) -> RuleSpec:
        """Return the explicit plan, or chain the stages into a local DAG."""
        if self.plan is not None:
            return self.plan

        fp_of = {s.id: stage_fingerprint(s) for s in self.stages}
        nodes: dict[str, RulePlanNode] = {}
        for stage in self.stages:
            local_children = [fp_of[c] for c in stage.children if c in fp_of]
            nodes[fp_of[stage.id]] = RulePlanNode(children=local_children)

        has_parent = {c for n in nodes.values() for c in n.children}
        root = ""
        for stage in self.stages:
            if fp_of[stage.id] not in has_parent:
                root = fp_of[stage.id]
                break
        if not root and self.stages:
            root = fp_of[self.stages[0].id]

        return RuleSpec(text=self.text, root=root, nodes=nodes)


@dataclass
class Stratum:
    label: str = ""
    enter: list[RawNode] = field(default_factory=list)
    rules: list[RawRule] = field(default_factory=list)
    runtime: list[RawNode] = field(default_factory=list)
    leave: list[RawNode] = field(default_factory=list)


@dataclass
class OpsSpec:
    """Parsed ops spec document."""

    input: list[RawNode] = field(default_factory=list)
    strata: list[Stratum] = field(default_factory=list)
    inspect: list[RawNode] = field(default_factory=list)

    def all_nodes(self) -> list[RawNode]:
        """Gather every node record from all buckets, in declaration order."""
        out: list[RawNode] = list(self.input)
        for s in self.strata:
            out.extend(s.enter)
            for r in s.rules:
                out.extend(r.stages)
            out.extend(s.runtime)
            out.extend(s.leave)
        out.extend(self.inspect)
        return out

    def rules(self) -> list[RuleSpec]:
        return [r.to_rule_spec() for s in self.strata for r in s.rules]

    def fingerprint_to_node(self) -> dict[str, str]:
        """Map every declared node fingerprint to its node name.

        Rule stages without a declared fingerprint are keyed by their id, so
        derived plans always resolve to their stage nodes.
        """
        out: dict[str, str] = {}
        for s in self.strata:
            for r in s.rules:
                for stage in r.stages:
                    out.setdefault(stage_fingerprint(stage), stage.name)
        for node in self.all_nodes():
            if node.fingerprint:
                out[node.fingerprint] = node.name
        return out


def stage_fingerprint(node: RawNode) -> str:
    return node.fingerprint or node.name


# ── Field parsing ────────────────────────────────────────────────────────────


def _expect_list(value: Any, location: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise OpsSpecError(f"expected a list, got {type(value).__name__}", location)
    return value


def _expect_uint(value: Any, location: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise OpsSpecError(f"expected an unsigned integer, got {value!r}", location)
    return value


def _expect_str(value: Any, location: str) -> str:
    if not isinstance(value, str):
        raise OpsSpecError(f"expected a string, got {value!r}", location)
    return value


def _parse_operator(data: Any, location: str) -> Addr:
    if not isinstance(data, dict) or "addr" not in data:
        raise OpsSpecError("operator must be an object with an 'addr' list", location)
    parts = _expect_list(data["addr"], f"{location}.addr")
    return Addr(tuple(_expect_uint(p, f"{location}.addr") for p in parts))


def _parse_node(data: Any, location: str) -> RawNode:
    if not isinstance(data, dict):
        raise OpsSpecError("node record must be an object", location)
    if "id" not in data or "label" not in data:
        raise OpsSpecError("node record requires 'id' and 'label'", location)

    node_id = _expect_uint(data["id"], f"{location}.id")
    loc = f"{location}[id={node_id}]"
    fingerprint = data.get("fingerprint")

    return RawNode(
        id=node_id,
        label=_expect_str(data["label"], f"{loc}.label"),
        children=[
            _expect_uint(c, f"{loc}.children")
            for c in _expect_list(data.get("children"), f"{loc}.children")
        ],
        operators=[
            _parse_operator(op, f"{loc}.operators[{i}]")
            for i, op in enumerate(_expect_list(data.get("operators"), f"{loc}.operators"))
        ],
        parents=[
            _expect_uint(p, f"{loc}.parents")
            for p in _expect_list(data.get("parents"), f"{loc}.parents")
        ],
        tags=[
            _expect_str(t, f"{loc}.tags")
            for t in _expect_list(data.get("tags"), f"{loc}.tags")
        ],
        block=_expect_str(data.get("block", ""), f"{loc}.block"),
        fingerprint=None if fingerprint is None else _expect_str(fingerprint, f"{loc}.fingerprint"),
    )


def _parse_nodes(data: Any, location: str) -> list[RawNode]:
    return [
        _parse_node(n, f"{location}[{i}]")
        for i, n in enumerate(_expect_list(data, location))
    ]


def _parse_plan(data: Any, text: str, location: str) -> RuleSpec:
    if not isinstance(data, dict):
        raise OpsSpecError("rule plan must be an object", location)
    raw_nodes = data.get("nodes") or {}
    if not isinstance(raw_nodes, dict):
        raise OpsSpecError("rule plan 'nodes' must be an object", location)

    nodes = {}
    for fp, node in raw_nodes.items():
        node = node or {}
        if not isinstance(node, dict):
            raise OpsSpecError("rule plan node must be an object", f"{location}.nodes.{fp}")
        children = _expect_list(node.get("children"), f"{location}.nodes.{fp}.children")
        nodes[str(fp)] = RulePlanNode(children=[str(c) for c in children])

    return RuleSpec(text=text, root=str(data.get("root", "")), nodes=nodes)


def _parse_rule(data: Any, location: str) -> RawRule:
    if not isinstance(data, dict):
        raise OpsSpecError("rule record must be an object", location)
    text = _expect_str(data.get("rule", data.get("text", "")), f"{location}.rule")
    plan = data.get("plan")
    return RawRule(
        text=text,
        stages=_parse_nodes(data.get("stages"), f"{location}.stages"),
        plan=None if plan is None else _parse_plan(plan, text, f"{location}.plan"),
    )


def _parse_stratum(data: Any, location: str) -> Stratum:
    if not isinstance(data, dict):
        raise OpsSpecError("stratum must be an object", location)
    return Stratum(
        label=str(data.get("label", "")),
        enter=_parse_nodes(data.get("enter"), f"{location}.enter"),
        rules=[
            _parse_rule(r, f"{location}.rules[{i}]")
            for i, r in enumerate(_expect_list(data.get("rules"), f"{location}.rules"))
        ],
        runtime=_parse_nodes(data.get("runtime"), f"{location}.runtime"),
        leave=_parse_nodes(data.get("leave"), f"{location}.leave"),
    )


def parse_ops_data(data: Any) -> OpsSpec:
    """Parse an already-deserialized ops spec document."""
    if not isinstance(data, dict):
        raise OpsSpecError("top level must be an object")
    return OpsSpec(
        input=_parse_nodes(data.get("input"), "input"),
        strata=[
            _parse_stratum(s, f"strata[{i}]")
            for i, s in enumerate(_expect_list(data.get("strata"), "strata"))
        ],
        inspect=_parse_nodes(data.get("inspect"), "inspect"),
    )


def load_ops_spec(path: Path | str) -> OpsSpec:
    """
    Load an ops spec file (JSON, or YAML for .yaml/.yml files).

    Raises:
        FileNotFoundError: If the file doesn't exist
        OpsSpecError: If the document does not have the expected shape
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Ops spec file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() in (".yaml", ".yml"):
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise OpsSpecError(f"invalid YAML: {e}", str(path)) from e
        else:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise OpsSpecError(f"invalid JSON: {e}", str(path)) from e

    if data is None:
        data = {}
    return parse_ops_data(data)
