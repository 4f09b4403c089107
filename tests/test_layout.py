"""Tests for the layered graph layout."""

from __future__ import annotations

import math

import pytest

from flowlog_profiler.layout.layered import (
    LayeredGraphLayout,
    LayoutConfig,
    LayoutNode,
    assign_depths,
    build_adjacency,
    interpolate_color,
    node_box_size,
    reduce_crossings,
    sweep_down,
    topological_order,
)
from flowlog_profiler.settings import Settings
from flowlog_profiler.view.report import build_report


def nodes_from(children: dict[str, list[str]], weights=None) -> dict[str, LayoutNode]:
    weights = weights or {}
    return {
        n: LayoutNode(name=n, label=n, children=tuple(kids), weight=weights.get(n, 0.0))
        for n, kids in children.items()
    }


@pytest.fixture
def diamond_layout(diamond_ops, diamond_log):
    report = build_report(diamond_ops, diamond_log).report
    return LayeredGraphLayout().layout_report(report)


class TestOrderAndDepth:
    def test_kahn_uses_input_order(self):
        _, children = build_adjacency(nodes_from({"b": ["c"], "a": ["c"], "c": []}))
        assert topological_order(["b", "a", "c"], children) == ["b", "a", "c"]

    def test_cycle_remainder_sorted(self):
        nodes = nodes_from({"b": ["a"], "a": ["b"], "c": []})
        _, children = build_adjacency(nodes)
        assert topological_order(list(nodes), children) == ["c", "a", "b"]

    def test_depth_is_longest_path(self):
        nodes = nodes_from({"a": ["b", "c"], "b": ["c"], "c": []})
        parents, children = build_adjacency(nodes)
        order = topological_order(list(nodes), children)
        assert assign_depths(order, parents) == {"a": 0, "b": 1, "c": 2}

    def test_diamond_depths(self, diamond_layout):
        assert diamond_layout.depth == {"1": 0, "2": 1, "3": 1, "4": 2}
        assert diamond_layout.layers == (("1",), ("2", "3"), ("4",))

    def test_children_strictly_below_parents(self, diamond_layout):
        for edge in diamond_layout.edges:
            assert diamond_layout.depth[edge.target] > diamond_layout.depth[edge.source]

    def test_unknown_children_ignored(self):
        parents, children = build_adjacency(nodes_from({"a": ["ghost", "b", "b"], "b": []}))
        assert children["a"] == ["b"]
        assert parents["b"] == ["a"]


class TestCrossingReduction:
    def test_untangles_two_edges(self):
        nodes = nodes_from({"a": ["z"], "b": ["y"], "y": [], "z": []})
        result = LayeredGraphLayout().layout(nodes)
        assert result.layers == (("a", "b"), ("z", "y"))

    def test_nodes_without_adjacent_neighbors_go_last(self):
        layers = [["a"], ["m", "z"]]
        sweep_down(layers, {"m": ["q"], "z": ["a"]})
        assert layers == [["a"], ["z", "m"]]

    def test_ties_broken_by_name(self):
        layers = [["p"], ["c", "b", "a"]]
        sweep_down(layers, {"a": ["p"], "b": ["p"], "c": ["p"]})
        assert layers[1] == ["a", "b", "c"]

    def test_reduce_crossings_returns_copy(self):
        layers = [["a", "b"], ["y", "z"]]
        out = reduce_crossings(layers, {"z": ["a"], "y": ["b"]}, {"a": ["z"], "b": ["y"]})
        assert out == [["a", "b"], ["z", "y"]]
        assert layers == [["a", "b"], ["y", "z"]]


class TestGeometry:
    def test_single_node_canvas(self):
        result = LayeredGraphLayout().layout(nodes_from({"x": []}))
        box = result.boxes["x"]
        assert (result.width, result.height) == (960, 200)
        assert (box.x, box.y) == (480, 40)
        assert (box.width, box.height) == (140, 36)
        assert box.lines == ("x",)

    def test_wide_layer_widens_canvas(self):
        kids = [f"c{i}" for i in range(6)]
        nodes = nodes_from({"root": kids, **{k: [] for k in kids}})
        result = LayeredGraphLayout().layout(nodes)
        assert result.width == 6 * 220
        assert result.height == 2 * 120 + 80
        xs = [result.boxes[k].x for k in result.layers[1]]
        assert xs == sorted(xs)
        assert xs[0] == pytest.approx(1320 / 7)

    def test_box_size_clamped(self):
        config = LayoutConfig()
        w, h, lines = node_box_size("a" * 60, config)
        assert w == 360
        assert lines == ["a" * 60]

        w, h, lines = node_box_size(" ".join(["word"] * 30), config)
        assert w <= 360
        assert len(lines) > 1
        assert h == len(lines) * 16 + 16

    def test_settings_feed_config(self):
        config = LayoutConfig.from_settings(Settings(layout_slot_width=300.0, layout_layer_gap=90.0))
        assert config.slot_width == 300.0
        assert config.layer_gap == 90.0
        assert config.metrics.char_width == 7.0


class TestColor:
    def test_endpoints(self):
        config = LayoutConfig()
        assert interpolate_color(0.0, 10.0, config) == "rgb(233,242,255)"
        assert interpolate_color(10.0, 10.0, config) == "rgb(91,141,239)"

    def test_midpoint_rounds_half_up(self):
        assert interpolate_color(5.0, 10.0, LayoutConfig()) == "rgb(162,192,247)"

    def test_all_zero_weights(self):
        result = LayeredGraphLayout().layout(nodes_from({"a": ["b"], "b": []}))
        assert {b.fill for b in result.boxes.values()} == {"rgb(233,242,255)"}

    def test_heaviest_node_darkest(self):
        result = LayeredGraphLayout().layout(
            nodes_from({"a": ["b"], "b": []}, weights={"a": 1.0, "b": 4.0})
        )
        assert result.boxes["b"].fill == "rgb(91,141,239)"


class TestEdgeRouting:
    def test_vertical_horizontal_vertical(self, diamond_layout):
        edge = next(e for e in diamond_layout.edges if (e.source, e.target) == ("3", "4"))
        src, dst = diamond_layout.boxes["3"], diamond_layout.boxes["4"]
        (x1, y1), (x2, ym1), (x3, ym2), (x4, y4) = edge.points
        assert (x1, y1) == src.bottom_center
        assert (x4, y4) == dst.top_center
        assert x2 == x1 and x3 == x4
        assert ym1 == ym2 == pytest.approx((y1 + y4) / 2)

    def test_svg_path(self, diamond_layout):
        path = diamond_layout.edges[0].svg_path()
        assert path.startswith("M ")
        assert path.count("L ") == 3

    def test_to_dict(self, diamond_layout):
        d = diamond_layout.to_dict()
        assert len(d["boxes"]) == 4
        assert {"from", "to", "pathPoints"} <= set(d["edges"][0])
        assert "wrappedLines" in d["boxes"][0]


class TestDegenerateInputs:
    def test_cycle_does_not_raise(self):
        nodes = nodes_from({"a": ["b"], "b": ["a"], "c": []})
        result = LayeredGraphLayout().layout(nodes)
        assert set(result.boxes) == {"a", "b", "c"}
        assert result.order == ("c", "a", "b")
        assert all(not math.isnan(b.x) for b in result.boxes.values())

    def test_empty(self):
        result = LayeredGraphLayout().layout({})
        assert result.boxes == {}
        assert result.height == 80
