"""
Interactive surface model.

UI state is an explicit, immutable ViewState. Every user action (search text
change, expand/collapse toggle, node selection, tab switch, pointer drag,
wheel event) is a pure reducer returning a new state, and ``render(state,
report)`` recomputes the full drawing from scratch. There is no incremental
update: each call replaces the previous drawing.
"""

from __future__ import annotations

import html as _html
from dataclasses import dataclass, field, replace
from typing import Any

from flowlog_profiler.layout.layered import GraphLayout, LayeredGraphLayout
from flowlog_profiler.layout.text import fmt_num
from flowlog_profiler.layout.viewport import ViewportTransform
from flowlog_profiler.view.aggregation import OperatorView
from flowlog_profiler.view.report import ReportData, ResolvedNodeView

VIEW_TREE = "tree"
VIEW_GRAPH = "graph"
VIEWS = (VIEW_TREE, VIEW_GRAPH)


@dataclass(frozen=True)
class ViewState:
    selected: str | None = None
    expanded: frozenset[str] = frozenset()
    search: str = ""
    view: str = VIEW_TREE
    viewport: ViewportTransform = field(default_factory=ViewportTransform)

    def to_dict(self) -> dict[str, Any]:
        return {
            "selected": self.selected,
            "expanded": sorted(self.expanded),
            "search": self.search,
            "view": self.view,
            "viewport": self.viewport.to_dict(),
        }


def initial_state(report: ReportData) -> ViewState:
    """Roots expanded, first root selected."""
    return ViewState(
        selected=report.roots[0] if report.roots else None,
        expanded=frozenset(report.roots),
    )


# ── Reducers ─────────────────────────────────────────────────────────────────


def select_node(state: ViewState, name: str) -> ViewState:
    return replace(state, selected=name)


def toggle_expanded(state: ViewState, report: ReportData, name: str) -> ViewState:
    node = report.nodes.get(name)
    if node is None or not node.children:
        return state
    if name in state.expanded:
        return replace(state, expanded=state.expanded - {name})
    return replace(state, expanded=state.expanded | {name})


def expand_all(state: ViewState, report: ReportData) -> ViewState:
    expandable = {name for name, node in report.nodes.items() if node.children}
    return replace(state, expanded=state.expanded | expandable)


def collapse_all(state: ViewState) -> ViewState:
    return replace(state, expanded=frozenset())


def set_search(state: ViewState, text: str) -> ViewState:
    return replace(state, search=text or "")


def switch_view(state: ViewState, view: str) -> ViewState:
    if view not in VIEWS:
        raise ValueError(f"unknown view {view!r}; expected one of {VIEWS}")
    return replace(state, view=view)


def pan(state: ViewState, dx: float, dy: float) -> ViewState:
    return replace(state, viewport=state.viewport.pan(dx, dy))


def zoom(state: ViewState, wheel_delta: float, cursor_x: float, cursor_y: float) -> ViewState:
    return replace(state, viewport=state.viewport.zoom(wheel_delta, cursor_x, cursor_y))


# ── Drawing instructions ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class TreeRow:
    name: str
    label: str
    depth: int
    has_children: bool
    expanded: bool
    selected: bool
    self_total_active_ms: float
    self_activations: int


@dataclass(frozen=True)
class DetailPanel:
    name: str
    title: str
    meta: str
    operators: tuple[OperatorView, ...] = ()


@dataclass(frozen=True)
class Drawing:
    tree_rows: tuple[TreeRow, ...]
    detail: DetailPanel | None
    graph: GraphLayout | None = None
    svg: str | None = None


def fmt_ms(x: float) -> str:
    return f"{x:.3f}"


def node_matches(name: str, node: ResolvedNodeView, search: str) -> bool:
    if not search:
        return True
    s = search.lower()
    return s in name.lower() or s in (node.label or "").lower()


def visible_tree_rows(state: ViewState, report: ReportData) -> list[TreeRow]:
    """Rows of the drill-down tree.

    With an active search only matches and their primary-tree ancestors are
    shown; collapsed nodes hide their subtree either way.
    """
    must_show: set[str] | None = None
    if state.search:
        tree_parent = {c: name for name, node in report.nodes.items() for c in node.children}
        must_show = set()
        for name, node in report.nodes.items():
            if node_matches(name, node, state.search):
                cur: str | None = name
                while cur is not None and cur not in must_show:
                    must_show.add(cur)
                    cur = tree_parent.get(cur)

    rows: list[TreeRow] = []

    def walk(name: str, depth: int) -> None:
        node = report.nodes.get(name)
        if node is None:
            return
        if must_show is not None and name not in must_show:
            return

        is_expanded = name in state.expanded
        rows.append(TreeRow(
            name=name,
            label=node.label,
            depth=depth,
            has_children=bool(node.children),
            expanded=is_expanded,
            selected=state.selected == name,
            self_total_active_ms=node.self_total_active_ms,
            self_activations=node.self_activations,
        ))
        if node.children and is_expanded:
            for child in node.children:
                walk(child, depth + 1)

    for root in report.roots:
        walk(root, 0)
    return rows


def detail_panel(state: ViewState, report: ReportData) -> DetailPanel | None:
    if state.selected is None or state.selected not in report.nodes:
        return None
    node = report.nodes[state.selected]
    meta = (
        f"name: {node.name} | self: {fmt_ms(node.self_total_active_ms)} ms"
        f" | activations: {node.self_activations}"
    )
    if node.extra_parents:
        meta += f" extra parents: {', '.join(node.extra_parents)}"
    return DetailPanel(name=node.name, title=node.label, meta=meta, operators=node.operators)


def render_graph_svg(layout: GraphLayout, state: ViewState) -> str:
    """SVG markup for a layout, with the state's selection and viewport applied."""
    esc = _html.escape
    parts = [
        f'<svg id="graphSvg" viewBox="0 0 {fmt_num(layout.width)} {fmt_num(layout.height)}"'
        ' xmlns="http://www.w3.org/2000/svg">',
        f'<g id="viewport" transform="{state.viewport.to_svg()}">',
    ]
    for edge in layout.edges:
        parts.append(f'<path class="g-edge" d="{edge.svg_path()}" />')

    for box in layout.boxes.values():
        cls = "g-node selected" if state.selected == box.name else "g-node"
        tspans = "".join(
            f'<tspan x="{fmt_num(box.width / 2)}" dy="{0 if i == 0 else 16}">{esc(line)}</tspan>'
            for i, line in enumerate(box.lines)
        )
        parts.append(
            f'<g class="{cls}" data-name="{esc(box.name)}"'
            f' transform="translate({fmt_num(box.x0)}, {fmt_num(box.y0)})">'
            f'<rect width="{fmt_num(box.width)}" height="{fmt_num(box.height)}" fill="{box.fill}"></rect>'
            f'<text x="{fmt_num(box.width / 2)}" y="20" text-anchor="middle">{tspans}</text>'
            f"<title>{esc(box.label)}\nself_ms: {fmt_ms(box.weight)}</title>"
            "</g>"
        )
    parts.append("</g></svg>")
    return "".join(parts)


def render(
    state: ViewState,
    report: ReportData,
    engine: LayeredGraphLayout | None = None,
) -> Drawing:
    """Recompute the full drawing for ``state``."""
    graph = None
    svg = None
    if state.view == VIEW_GRAPH:
        graph = (engine or LayeredGraphLayout()).layout_report(report)
        svg = render_graph_svg(graph, state)

    return Drawing(
        tree_rows=tuple(visible_tree_rows(state, report)),
        detail=detail_panel(state, report),
        graph=graph,
        svg=svg,
    )
