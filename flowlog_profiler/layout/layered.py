"""
Layered Graph Layout.

Lays out the full DAG (not the spanning tree) as a top-down layered drawing:

1. Topological order (Kahn; cycles fall back to a lexicographic remainder)
2. Depth assignment (every node strictly below all of its parents)
3. Layering (nodes grouped by depth, initially sorted by name)
4. Crossing reduction (fixed down/up/down barycenter sweeps)
5. Geometry (evenly spaced slots, label-sized boxes)
6. Edge routing (vertical-horizontal-vertical paths)
7. Coloring (fill interpolated by self time)

The layout is advisory: degenerate inputs (cycles, isolated nodes, all-zero
weights) never raise.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Sequence

from flowlog_profiler.layout.text import TextMetrics, fmt_num, wrap_lines

if TYPE_CHECKING:
    from flowlog_profiler.settings import Settings
    from flowlog_profiler.view.report import ReportData

logger = logging.getLogger(__name__)

Color = tuple[int, int, int]


@dataclass(frozen=True)
class LayoutConfig:
    """Geometry constants for node boxes and the canvas."""

    pad_x: float = 12.0
    pad_y: float = 8.0
    line_height: float = 16.0
    min_width: float = 140.0
    max_width: float = 360.0
    min_height: float = 36.0
    font_size: float = 12.0
    char_width: float = 7.0

    layer_gap: float = 120.0
    top_margin: float = 40.0
    bottom_margin: float = 80.0
    canvas_min_width: float = 960.0
    slot_width: float = 220.0

    color_low: Color = (233, 242, 255)
    color_high: Color = (91, 141, 239)
    epsilon: float = 0.0001

    @classmethod
    def from_settings(cls, settings: "Settings") -> LayoutConfig:
        return cls(
            char_width=settings.layout_char_width,
            layer_gap=settings.layout_layer_gap,
            canvas_min_width=settings.layout_min_width,
            slot_width=settings.layout_slot_width,
        )

    @property
    def metrics(self) -> TextMetrics:
        return TextMetrics(font_size=self.font_size, char_width=self.char_width)


@dataclass(frozen=True)
class LayoutNode:
    """Layout input for one node."""

    name: str
    label: str = ""
    children: tuple[str, ...] = ()
    weight: float = 0.0  # self_total_active_ms, drives the fill color


@dataclass(frozen=True)
class NodeBox:
    name: str
    label: str
    x: float  # center
    y: float  # center
    width: float
    height: float
    lines: tuple[str, ...]
    depth: int
    fill: str
    weight: float = 0.0

    @property
    def x0(self) -> float:
        return self.x - self.width / 2

    @property
    def y0(self) -> float:
        return self.y - self.height / 2

    @property
    def top_center(self) -> tuple[float, float]:
        return self.x, self.y0

    @property
    def bottom_center(self) -> tuple[float, float]:
        return self.x, self.y0 + self.height

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "x": self.x,
            "y": self.y,
            "x0": self.x0,
            "y0": self.y0,
            "width": self.width,
            "height": self.height,
            "wrappedLines": list(self.lines),
            "depth": self.depth,
            "fill": self.fill,
            "weight": self.weight,
        }


@dataclass(frozen=True)
class EdgeRoute:
    source: str
    target: str
    points: tuple[tuple[float, float], ...]

    def svg_path(self) -> str:
        head, *rest = self.points
        parts = [f"M {fmt_num(head[0])} {fmt_num(head[1])}"]
        parts.extend(f"L {fmt_num(x)} {fmt_num(y)}" for x, y in rest)
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.source,
            "to": self.target,
            "pathPoints": [list(p) for p in self.points],
        }


@dataclass(frozen=True)
class GraphLayout:
    width: float
    height: float
    boxes: dict[str, NodeBox] = field(default_factory=dict)
    edges: tuple[EdgeRoute, ...] = ()
    order: tuple[str, ...] = ()  # topological order used for depths
    depth: dict[str, int] = field(default_factory=dict)
    layers: tuple[tuple[str, ...], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "boxes": [b.to_dict() for b in self.boxes.values()],
            "edges": [e.to_dict() for e in self.edges],
            "layers": [list(layer) for layer in self.layers],
        }


# ── Phases ───────────────────────────────────────────────────────────────────


def build_adjacency(
    nodes: Mapping[str, LayoutNode],
) -> tuple[dict[str, list[str]], dict[str, list[str]]]:
    """Parent and child lists restricted to known names, in input order."""
    parents: dict[str, list[str]] = {n: [] for n in nodes}
    children: dict[str, list[str]] = {n: [] for n in nodes}
    for u, node in nodes.items():
        for v in dict.fromkeys(node.children):
            if v not in nodes:
                continue
            parents[v].append(u)
            children[u].append(v)
    return parents, children


def topological_order(names: Sequence[str], children: Mapping[str, Sequence[str]]) -> list[str]:
    """Kahn's algorithm with input order as queue order.

    Nodes left over by a cycle are appended sorted by name, so the result
    always covers every node exactly once.
    """
    indeg = {n: 0 for n in names}
    for u in names:
        for v in children.get(u, ()):
            indeg[v] += 1

    queue = deque(n for n in names if indeg[n] == 0)
    topo = []
    while queue:
        u = queue.popleft()
        topo.append(u)
        for v in children.get(u, ()):
            indeg[v] -= 1
            if indeg[v] == 0:
                queue.append(v)

    if len(topo) != len(names):
        seen = set(topo)
        rest = sorted(n for n in names if n not in seen)
        logger.debug(f"Layout input has a cycle; {len(rest)} nodes ordered by name")
        topo.extend(rest)
    return topo


def assign_depths(
    order: Sequence[str],
    parents: Mapping[str, Sequence[str]],
    roots: Iterable[str] = (),
) -> dict[str, int]:
    """depth = max(depth(parent) + 1), visiting nodes in ``order``."""
    depth = {n: 0 for n in order}
    for r in roots:
        if r in depth:
            depth[r] = 0

    for v in order:
        d = depth[v]
        for p in parents.get(v, ()):
            d = max(d, depth.get(p, 0) + 1)
        depth[v] = d
    return depth


def group_layers(depth: Mapping[str, int]) -> list[list[str]]:
    """Nodes grouped by depth (ascending), each layer sorted by name."""
    by_depth: dict[int, list[str]] = {}
    for name, d in depth.items():
        by_depth.setdefault(d, []).append(name)
    return [sorted(by_depth[d]) for d in sorted(by_depth)]


def _barycenter(neighbors: Sequence[str], index: Mapping[str, int]) -> float:
    positions = [index[n] for n in neighbors if n in index]
    if not positions:
        return math.inf
    return sum(positions) / len(positions)


def sweep_down(layers: list[list[str]], parents: Mapping[str, Sequence[str]]) -> None:
    """Reorder each layer by the mean index of its parents in the layer above."""
    for i in range(1, len(layers)):
        idx_prev = {n: j for j, n in enumerate(layers[i - 1])}
        layers[i].sort(key=lambda n: (_barycenter(parents.get(n, ()), idx_prev), n))


def sweep_up(layers: list[list[str]], children: Mapping[str, Sequence[str]]) -> None:
    """Reorder each layer by the mean index of its children in the layer below."""
    for i in range(len(layers) - 2, -1, -1):
        idx_next = {n: j for j, n in enumerate(layers[i + 1])}
        layers[i].sort(key=lambda n: (_barycenter(children.get(n, ()), idx_next), n))


def reduce_crossings(
    layers: list[list[str]],
    parents: Mapping[str, Sequence[str]],
    children: Mapping[str, Sequence[str]],
) -> list[list[str]]:
    """Fixed three-pass barycenter heuristic: down, up, down."""
    layers = [list(layer) for layer in layers]
    sweep_down(layers, parents)
    sweep_up(layers, children)
    sweep_down(layers, parents)
    return layers


def interpolate_color(weight: float, max_weight: float, config: LayoutConfig) -> str:
    t = min(1.0, max(0.0, (weight or 0.0) / max_weight))
    mix = [
        int(math.floor(lo + (hi - lo) * t + 0.5))
        for lo, hi in zip(config.color_low, config.color_high)
    ]
    return f"rgb({mix[0]},{mix[1]},{mix[2]})"


def node_box_size(label: str, config: LayoutConfig) -> tuple[float, float, list[str]]:
    """Box width, height and wrapped lines for a label."""
    metrics = config.metrics
    max_content = config.max_width - 2 * config.pad_x
    lines = wrap_lines(label, max_content, metrics)

    content_w = min(max_content, max((metrics.measure(ln) for ln in lines), default=0.0))
    w = max(config.min_width, min(config.max_width, content_w + 2 * config.pad_x))
    h = max(config.min_height, len(lines) * config.line_height + 2 * config.pad_y)
    return w, h, lines


def route_edge(source: NodeBox, target: NodeBox) -> EdgeRoute:
    """Bottom-center of source -> top-center of target via the vertical midpoint."""
    x1, y1 = source.bottom_center
    x2, y2 = target.top_center
    mid_y = (y1 + y2) / 2
    return EdgeRoute(
        source=source.name,
        target=target.name,
        points=((x1, y1), (x1, mid_y), (x2, mid_y), (x2, y2)),
    )


def layout_nodes_from_report(report: "ReportData") -> dict[str, LayoutNode]:
    """Layout input from a report: DAG children, falling back to tree children."""
    return {
        name: LayoutNode(
            name=name,
            label=node.label or name,
            children=tuple(node.dag_children or node.children),
            weight=node.self_total_active_ms,
        )
        for name, node in report.nodes.items()
    }


class LayeredGraphLayout:
    """Deterministic layered layout for shallow, mostly acyclic DAGs."""

    def __init__(self, config: LayoutConfig | None = None):
        self.config = config or LayoutConfig()

    def layout(self, nodes: Mapping[str, LayoutNode], roots: Iterable[str] = ()) -> GraphLayout:
        cfg = self.config
        names = list(nodes)
        parents, children = build_adjacency(nodes)

        order = topological_order(names, children)
        depth = assign_depths(order, parents, roots)
        layers = reduce_crossings(group_layers(depth), parents, children)

        max_layer = max((len(layer) for layer in layers), default=0)
        width = max(cfg.canvas_min_width, max(max_layer, 1) * cfg.slot_width)
        height = len(layers) * cfg.layer_gap + cfg.bottom_margin

        max_weight = max([n.weight or 0.0 for n in nodes.values()] + [cfg.epsilon])

        centers: dict[str, tuple[float, float]] = {}
        for li, layer in enumerate(layers):
            step = width / (len(layer) + 1)
            for idx, name in enumerate(layer):
                centers[name] = ((idx + 1) * step, cfg.top_margin + li * cfg.layer_gap)

        boxes: dict[str, NodeBox] = {}
        for name, node in nodes.items():
            cx, cy = centers[name]
            w, h, lines = node_box_size(node.label or name, cfg)
            boxes[name] = NodeBox(
                name=name,
                label=node.label or name,
                x=cx,
                y=cy,
                width=w,
                height=h,
                lines=tuple(lines),
                depth=depth[name],
                fill=interpolate_color(node.weight, max_weight, cfg),
                weight=node.weight,
            )

        edges = tuple(
            route_edge(boxes[u], boxes[v]) for u in names for v in children[u]
        )

        return GraphLayout(
            width=width,
            height=height,
            boxes=boxes,
            edges=edges,
            order=tuple(order),
            depth=depth,
            layers=tuple(tuple(layer) for layer in layers),
        )

    def layout_report(self, report: "ReportData") -> GraphLayout:
        return self.layout(layout_nodes_from_report(report), report.roots)
