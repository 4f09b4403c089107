"""Layered graph layout, label metrics and the pan/zoom viewport."""

from flowlog_profiler.layout.layered import (
    EdgeRoute,
    GraphLayout,
    LayeredGraphLayout,
    LayoutConfig,
    LayoutNode,
    NodeBox,
)
from flowlog_profiler.layout.text import TextMetrics, wrap_lines
from flowlog_profiler.layout.viewport import ViewportTransform

__all__ = [
    "EdgeRoute",
    "GraphLayout",
    "LayeredGraphLayout",
    "LayoutConfig",
    "LayoutNode",
    "NodeBox",
    "TextMetrics",
    "wrap_lines",
    "ViewportTransform",
]
