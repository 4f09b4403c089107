"""Aggregation, hierarchy resolution, rule views and report assembly."""

from flowlog_profiler.view.aggregation import (
    AggregationEngine,
    AggregationResult,
    NodeAggregate,
    OperatorView,
    TotalsView,
)
from flowlog_profiler.view.hierarchy import Hierarchy, HierarchyResolver
from flowlog_profiler.view.rules import RulePlanNodeView, RuleView, RuleViewBuilder
from flowlog_profiler.view.report import (
    ReportBuild,
    ReportData,
    ResolvedNodeView,
    build_report,
    build_report_data,
)

__all__ = [
    "AggregationEngine",
    "AggregationResult",
    "NodeAggregate",
    "OperatorView",
    "TotalsView",
    "Hierarchy",
    "HierarchyResolver",
    "RulePlanNodeView",
    "RuleView",
    "RuleViewBuilder",
    "ReportBuild",
    "ReportData",
    "ResolvedNodeView",
    "build_report",
    "build_report_data",
]
