"""
Rule views.

Each declared rule carries its own small DAG keyed by fingerprint. A plan node
is ``shared`` when it has more than one parent inside that rule; this is local
to the rule and unrelated to extra parents in the global hierarchy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from flowlog_profiler.diagnostics import UNKNOWN_FINGERPRINT, Diagnostics
from flowlog_profiler.ops.parser import RuleSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RulePlanNodeView:
    fingerprint: str
    node: str | None
    label: str | None
    children: list[str] = field(default_factory=list)
    parents: list[str] = field(default_factory=list)
    shared: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "fingerprint": self.fingerprint,
            "node": self.node,
            "label": self.label,
            "children": list(self.children),
            "parents": list(self.parents),
            "shared": self.shared,
        }


@dataclass(frozen=True)
class RuleView:
    text: str
    root: str
    nodes: dict[str, RulePlanNodeView] = field(default_factory=dict)

    def shared_nodes(self) -> list[str]:
        return [fp for fp, n in self.nodes.items() if n.shared]

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "root": self.root,
            "nodes": {fp: n.to_dict() for fp, n in self.nodes.items()},
        }


class RuleViewBuilder:
    """Builds per-rule plan views with shared-node detection."""

    def __init__(
        self,
        labels: Mapping[str, str],
        fingerprint_to_node: Mapping[str, str],
        diagnostics: Diagnostics | None = None,
    ):
        self.labels = labels
        self.fingerprint_to_node = fingerprint_to_node
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def build_rule(self, rule: RuleSpec, index: int = 0) -> RuleView:
        # Local parent lists for shared-node detection
        parents: dict[str, list[str]] = {}
        for fp in sorted(rule.nodes):
            for child in rule.nodes[fp].children:
                parents.setdefault(child, []).append(fp)

        nodes: dict[str, RulePlanNodeView] = {}
        for fp in sorted(rule.nodes):
            node_name = self.fingerprint_to_node.get(fp)
            if node_name is None:
                self.diagnostics.warn(
                    UNKNOWN_FINGERPRINT,
                    f"rule {index} references fingerprint '{fp}' with no corresponding node",
                    location=f"rule:{index}",
                )
            label = self.labels.get(node_name) if node_name is not None else None

            parent_list = parents.get(fp, [])
            nodes[fp] = RulePlanNodeView(
                fingerprint=fp,
                node=node_name,
                label=label,
                children=list(rule.nodes[fp].children),
                parents=parent_list,
                shared=len(parent_list) > 1,
            )

        return RuleView(text=rule.text, root=rule.root, nodes=nodes)

    def build(self, rules: Iterable[RuleSpec]) -> list[RuleView]:
        return [self.build_rule(rule, i) for i, rule in enumerate(rules)]
