"""FlowLog profiler: per-name operator timing reports from a Timely profile log."""

from flowlog_profiler.addr import Addr, parse_addr
from flowlog_profiler.diagnostics import DiagnosticIssue, Diagnostics
from flowlog_profiler.errors import ProfilerError
from flowlog_profiler.log import LogRow, parse_log_file, parse_log_text
from flowlog_profiler.ops.parser import OpsSpec, load_ops_spec, parse_ops_data
from flowlog_profiler.view.report import ReportBuild, ReportData, build_report, build_report_data

__version__ = "0.1.0"

__all__ = [
    "Addr",
    "parse_addr",
    "DiagnosticIssue",
    "Diagnostics",
    "ProfilerError",
    "LogRow",
    "parse_log_file",
    "parse_log_text",
    "OpsSpec",
    "load_ops_spec",
    "parse_ops_data",
    "ReportBuild",
    "ReportData",
    "build_report",
    "build_report_data",
]
