"""
Report assembly.

Combines the validated topology, the aggregated log metrics, the resolved
spanning tree and the rule views into one immutable ReportData. Serialization
sorts every map key so identical inputs produce byte-identical output.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from flowlog_profiler.addr import Addr
from flowlog_profiler.diagnostics import Diagnostics
from flowlog_profiler.log import LogRow, validate_log_index
from flowlog_profiler.ops.builder import NodeGraph, NodeGraphBuilder
from flowlog_profiler.ops.parser import OpsSpec, RuleSpec
from flowlog_profiler.view.aggregation import AggregationEngine, OperatorView, TotalsView
from flowlog_profiler.view.hierarchy import HierarchyResolver
from flowlog_profiler.view.rules import RuleView, RuleViewBuilder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedNodeView:
    """One named node as seen by the report."""

    name: str
    label: str
    block: str = ""
    fingerprint: str | None = None
    tags: tuple[str, ...] = ()

    # Primary tree children (spanning tree derived from DAG)
    children: tuple[str, ...] = ()
    # All DAG children, preferred by the graph layout
    dag_children: tuple[str, ...] = ()
    # All DAG parents (may include multi-parent edges)
    dag_parents: tuple[str, ...] = ()
    # DAG parents other than the primary parent
    extra_parents: tuple[str, ...] = ()

    # Aggregated over operators owned by this name
    self_activations: int = 0
    self_total_active_ms: float = 0.0
    operators: tuple[OperatorView, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "block": self.block,
            "fingerprint": self.fingerprint,
            "tags": list(self.tags),
            "children": list(self.children),
            "dag_children": list(self.dag_children),
            "dag_parents": list(self.dag_parents),
            "extra_parents": list(self.extra_parents),
            "self_activations": self.self_activations,
            "self_total_active_ms": self.self_total_active_ms,
            "operators": [op.to_dict() for op in self.operators],
        }


@dataclass(frozen=True)
class ReportData:
    roots: tuple[str, ...]
    nodes: dict[str, ResolvedNodeView]
    rules: tuple[RuleView, ...]
    totals: TotalsView

    def to_dict(self) -> dict[str, Any]:
        return {
            "roots": list(self.roots),
            "nodes": {name: n.to_dict() for name, n in self.nodes.items()},
            "rules": [r.to_dict() for r in self.rules],
            "totals": self.totals.to_dict(),
        }

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, indent=indent, ensure_ascii=False)


@dataclass
class ReportBuild:
    """A built report together with its topology and diagnostics."""

    report: ReportData
    graph: NodeGraph
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


def build_report_data(
    graph: NodeGraph,
    log: Mapping[Addr, LogRow],
    rules: Iterable[RuleSpec] = (),
    fingerprint_to_node: Mapping[str, str] | None = None,
    diagnostics: Diagnostics | None = None,
) -> ReportData:
    """
    Build report data from a validated topology and a log index.

    Performs:
    - ownership check: an operator addr assigned to multiple names is fatal
    - aggregation: mapped addrs missing from the log are warned about and skipped
    - spanning-tree resolution over the DAG parents
    - per-rule plan views
    """
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    agg = AggregationEngine(diagnostics).aggregate(graph.nodes, log)
    hierarchy = HierarchyResolver(diagnostics).resolve(
        graph.nodes.keys(), graph.parents, graph.roots
    )

    nodes: dict[str, ResolvedNodeView] = {}
    for name, spec in graph.nodes.items():
        metrics = agg.nodes[name]
        nodes[name] = ResolvedNodeView(
            name=name,
            label=spec.label,
            block=spec.block,
            fingerprint=spec.fingerprint,
            tags=spec.tags,
            children=tuple(hierarchy.children_of(name)),
            dag_children=tuple(sorted(set(graph.dag_children(name)))),
            dag_parents=tuple(hierarchy.dag_parents[name]),
            extra_parents=tuple(hierarchy.extra_parents[name]),
            self_activations=metrics.self_activations,
            self_total_active_ms=metrics.self_total_active_ms,
            operators=metrics.operators,
        )

    labels = {name: spec.label for name, spec in graph.nodes.items()}
    rule_views = RuleViewBuilder(labels, fingerprint_to_node or {}, diagnostics).build(rules)

    return ReportData(
        roots=tuple(hierarchy.roots),
        nodes=nodes,
        rules=tuple(rule_views),
        totals=agg.totals,
    )


def build_report(
    spec: OpsSpec,
    log: Mapping[Addr, LogRow],
    strict_log: bool = True,
) -> ReportBuild:
    """Run the full pipeline: validate topology, aggregate, resolve, build rules."""
    diagnostics = Diagnostics()
    graph = NodeGraphBuilder(diagnostics).build_from_spec(spec)

    if strict_log:
        log = validate_log_index(log)

    report = build_report_data(
        graph,
        log,
        rules=spec.rules(),
        fingerprint_to_node=spec.fingerprint_to_node(),
        diagnostics=diagnostics,
    )
    logger.info(
        f"Built report: {report.totals.names} names, "
        f"{report.totals.operators_mapped}/{report.totals.operators_in_log} operators mapped, "
        f"{len(diagnostics.warnings())} warnings"
    )
    return ReportBuild(report=report, graph=graph, diagnostics=diagnostics)
