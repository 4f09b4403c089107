"""Ops spec loading and topology validation."""

from flowlog_profiler.ops.parser import (
    OpsSpec,
    RawNode,
    RawRule,
    RulePlanNode,
    RuleSpec,
    Stratum,
    load_ops_spec,
    parse_ops_data,
    stage_fingerprint,
)
from flowlog_profiler.ops.builder import NodeGraph, NodeGraphBuilder, NodeSpec

__all__ = [
    "OpsSpec",
    "RawNode",
    "RawRule",
    "RulePlanNode",
    "RuleSpec",
    "Stratum",
    "load_ops_spec",
    "parse_ops_data",
    "stage_fingerprint",
    "NodeGraph",
    "NodeGraphBuilder",
    "NodeSpec",
]
