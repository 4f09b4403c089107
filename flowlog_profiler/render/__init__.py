"""Interactive surface model and the HTML report."""

from flowlog_profiler.render.surface import Drawing, ViewState, initial_state, render
from flowlog_profiler.render.html import render_html_report, write_html_report

__all__ = [
    "Drawing",
    "ViewState",
    "initial_state",
    "render",
    "render_html_report",
    "write_html_report",
]
