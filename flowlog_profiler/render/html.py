"""
Self-contained HTML report.

Embeds the report data, the initial view state and a pre-computed graph
drawing into a single page. The page's script only redraws the tree and
detail panes and applies pan/zoom; it never re-runs the layout.
"""

from __future__ import annotations

import html as _html
import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from flowlog_profiler.layout.layered import GraphLayout, LayeredGraphLayout
from flowlog_profiler.layout.viewport import MAX_SCALE, MIN_SCALE, ZOOM_K
from flowlog_profiler.render.surface import ViewState, initial_state, render_graph_svg
from flowlog_profiler.render.template import HTML_TEMPLATE
from flowlog_profiler.view.report import ReportData

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "flowlog profile"

_PLACEHOLDER = re.compile(r"__[A-Z_]+__")


def embed_json(value: Any) -> str:
    """JSON safe to inline inside a <script> element."""
    text = json.dumps(value, sort_keys=True, ensure_ascii=False)
    return text.replace("</", "<\\/")


def render_html_report(
    report: ReportData,
    layout: GraphLayout | None = None,
    state: ViewState | None = None,
    title: str = DEFAULT_TITLE,
    generated_at: str | None = None,
) -> str:
    """Render the report page as a string."""
    state = state or initial_state(report)
    layout = layout or LayeredGraphLayout().layout_report(report)
    if generated_at is None:
        generated_at = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")

    values = {
        "__TITLE__": _html.escape(title),
        "__GENERATED_AT__": _html.escape(generated_at),
        "__MIN_SCALE__": repr(MIN_SCALE),
        "__MAX_SCALE__": repr(MAX_SCALE),
        "__ZOOM_K__": repr(ZOOM_K),
        "__GRAPH_SVG__": render_graph_svg(layout, state),
        "__STATE__": embed_json(state.to_dict()),
        "__DATA__": embed_json(report.to_dict()),
    }
    # Single pass, so placeholder-like text inside substituted values is left alone
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(0), m.group(0)), HTML_TEMPLATE)


def write_html_report(
    report: ReportData,
    output_path: Path,
    layout: GraphLayout | None = None,
    title: str = DEFAULT_TITLE,
) -> Path:
    """Render the report page and write it to ``output_path``."""
    page = render_html_report(report, layout=layout, title=title)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(page)

    logger.info(f"Wrote report: {output_path}")
    return output_path
