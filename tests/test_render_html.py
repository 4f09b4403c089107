"""Tests for the self-contained HTML report."""

from __future__ import annotations

import json
import re

import pytest

from flowlog_profiler.ops.parser import parse_ops_data
from flowlog_profiler.render.html import embed_json, render_html_report, write_html_report
from flowlog_profiler.view.report import build_report


@pytest.fixture
def report(diamond_ops, diamond_log):
    return build_report(diamond_ops, diamond_log).report


def embedded(page: str, name: str):
    line = next(ln for ln in page.splitlines() if ln.startswith(f"const {name} = "))
    return json.loads(line[len(f"const {name} = "):-1].replace("<\\/", "</"))


class TestRenderHtml:
    def test_all_placeholders_filled(self, report):
        page = render_html_report(report, generated_at="2024-01-01 00:00:00 UTC")
        assert re.search(r"__[A-Z_]+__", page) is None
        assert "2024-01-01 00:00:00 UTC" in page

    def test_data_embedded(self, report):
        page = render_html_report(report)
        assert embedded(page, "DATA") == json.loads(report.to_json())
        assert embedded(page, "STATE")["selected"] == "1"

    def test_graph_svg_inlined(self, report):
        page = render_html_report(report)
        assert '<svg id="graphSvg"' in page
        assert page.count('class="g-node') >= 4

    def test_title_escaped(self, report):
        page = render_html_report(report, title="<b>t</b>")
        assert "<title>&lt;b&gt;t&lt;/b&gt;</title>" in page

    def test_script_close_in_label(self, diamond_log):
        spec = parse_ops_data({"input": [{"id": 1, "label": "</script><i>"}]})
        page = render_html_report(build_report(spec, diamond_log).report)
        assert page.count("</script>") == 1
        assert embedded(page, "DATA")["nodes"]["1"]["label"] == "</script><i>"

    def test_placeholder_text_in_label_untouched(self, diamond_log):
        spec = parse_ops_data({"input": [{"id": 1, "label": "__TITLE__"}]})
        page = render_html_report(build_report(spec, diamond_log).report, title="T")
        assert embedded(page, "DATA")["nodes"]["1"]["label"] == "__TITLE__"

    def test_embed_json_sorted(self):
        assert embed_json({"b": 1, "a": "</x>"}) == '{"a": "<\\/x>", "b": 1}'


class TestWriteHtml:
    def test_creates_parent_dirs(self, report, tmp_path):
        out = write_html_report(report, tmp_path / "nested" / "report.html")
        assert out.exists()
        assert out.read_text(encoding="utf-8").startswith("<!doctype html>")
