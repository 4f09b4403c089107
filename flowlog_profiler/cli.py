"""
FlowLog profiler CLI.

Usage:
    flowlog-profiler report --log <log> --ops <ops.json> [-o report.html]
    flowlog-profiler validate --ops <ops.json> [--log <log>]
    flowlog-profiler layout --ops <ops.json> [--log <log>] [-o layout.json]
    flowlog-profiler config show
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from flowlog_profiler.diagnostics import Diagnostics
from flowlog_profiler.errors import ProfilerError
from flowlog_profiler.layout.graph_convert import networkx_to_layout_nodes, topology_to_networkx
from flowlog_profiler.layout.layered import LayeredGraphLayout, LayoutConfig
from flowlog_profiler.log import parse_log_file
from flowlog_profiler.ops.builder import NodeGraphBuilder
from flowlog_profiler.ops.parser import load_ops_spec
from flowlog_profiler.render.html import write_html_report
from flowlog_profiler.settings import get_settings
from flowlog_profiler.view.hierarchy import HierarchyResolver
from flowlog_profiler.view.report import ReportBuild, build_report

app = typer.Typer(
    name="flowlog-profiler",
    help="FlowLog profiler: per-name operator timing reports from a Timely profile log",
    no_args_is_help=True,
)
config_app = typer.Typer(
    name="config",
    help="Configuration commands",
)
app.add_typer(config_app, name="config")

console = Console()


def setup_logging(level: str = "INFO") -> None:
    """Configure logging with rich output."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def _build(ops: Path, log: Path) -> ReportBuild:
    settings = get_settings()
    spec = load_ops_spec(ops)
    index = parse_log_file(log)
    return build_report(spec, index, strict_log=settings.strict_log)


def _print_diagnostics(diagnostics: Diagnostics) -> None:
    if not len(diagnostics):
        return
    table = Table(title="Diagnostics")
    table.add_column("Code", style="yellow")
    table.add_column("Location", style="cyan")
    table.add_column("Message")
    for issue in diagnostics:
        table.add_row(issue.code, issue.location or "-", issue.message)
    console.print(table)


@app.command()
def report(
    log: Path = typer.Option(..., "--log", help="Timely operator profile log"),
    ops: Path = typer.Option(..., "--ops", help="Ops spec (JSON or YAML)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output HTML path"),
    title: Optional[str] = typer.Option(None, help="Report title"),
):
    """Build the HTML report."""
    settings = get_settings()
    setup_logging(settings.log_level)

    try:
        built = _build(ops, log)
        layout = LayeredGraphLayout(LayoutConfig.from_settings(settings)).layout_report(built.report)
        out = write_html_report(
            built.report,
            output or settings.default_report_path,
            layout=layout,
            title=title or ops.stem,
        )
    except (ProfilerError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    totals = built.report.totals
    console.print(f"[green]Wrote {out}[/green]")
    console.print(
        f"  {totals.names} names, {totals.operators_mapped}/{totals.operators_in_log} operators mapped, "
        f"{totals.total_mapped_ms:.3f} ms"
    )
    if built.diagnostics.warnings():
        console.print(f"  [yellow]{len(built.diagnostics.warnings())} warnings[/yellow]")


@app.command()
def validate(
    ops: Path = typer.Option(..., "--ops", help="Ops spec (JSON or YAML)"),
    log: Optional[Path] = typer.Option(None, "--log", help="Also aggregate against this log"),
):
    """Validate an ops spec (and optionally a log) without writing anything."""
    settings = get_settings()
    setup_logging(settings.log_level)

    table = Table(title="Validation Summary")
    table.add_column("Check", style="cyan")
    table.add_column("Value", style="white")

    try:
        if log is None:
            diagnostics = Diagnostics()
            spec = load_ops_spec(ops)
            graph = NodeGraphBuilder(diagnostics).build_from_spec(spec)
            hierarchy = HierarchyResolver(diagnostics).resolve(
                graph.nodes.keys(), graph.parents, graph.roots
            )
            table.add_row("names", str(len(graph)))
            table.add_row("edges", str(len(graph.edges())))
            table.add_row("roots", str(len(hierarchy.roots)))
            table.add_row("rules", str(len(spec.rules())))
        else:
            built = _build(ops, log)
            diagnostics = built.diagnostics
            totals = built.report.totals
            table.add_row("names", str(totals.names))
            table.add_row("edges", str(len(built.graph.edges())))
            table.add_row("roots", str(len(built.report.roots)))
            table.add_row("rules", str(len(built.report.rules)))
            table.add_row("operators in log", str(totals.operators_in_log))
            table.add_row("operators mapped", str(totals.operators_mapped))
            table.add_row("mapped ms", f"{totals.total_mapped_ms:.3f}")
            table.add_row("mapped activations", str(totals.total_mapped_activations))
    except (ProfilerError, FileNotFoundError) as e:
        console.print(f"[red]Invalid: {e}[/red]")
        raise typer.Exit(1)

    table.add_row("warnings", str(len(diagnostics.warnings())))
    console.print(table)
    _print_diagnostics(diagnostics)
    console.print("[green]OK[/green]")


@app.command()
def layout(
    ops: Path = typer.Option(..., "--ops", help="Ops spec (JSON or YAML)"),
    log: Optional[Path] = typer.Option(None, "--log", help="Weight nodes by self time from this log"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JSON path"),
):
    """Compute the layered graph layout and dump it as JSON."""
    settings = get_settings()
    setup_logging(settings.log_level)
    engine = LayeredGraphLayout(LayoutConfig.from_settings(settings))

    try:
        if log is None:
            graph = NodeGraphBuilder().build_from_spec(load_ops_spec(ops))
            result = engine.layout(
                networkx_to_layout_nodes(topology_to_networkx(graph)), graph.roots
            )
        else:
            result = engine.layout_report(_build(ops, log).report)
    except (ProfilerError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    text = json.dumps(result.to_dict(), sort_keys=True, indent=2)
    if output is None:
        console.print_json(text)
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
        console.print(f"[green]Wrote {output}[/green]")


@config_app.command("show")
def config_show():
    """Show current configuration."""
    settings = get_settings()

    table = Table(title="FlowLog Profiler Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("log_level", settings.log_level)
    table.add_row("output_dir", str(settings.output_dir))
    table.add_row("report_filename", settings.report_filename)
    table.add_row("strict_log", str(settings.strict_log))
    table.add_row("", "")
    table.add_row("layout_char_width", str(settings.layout_char_width))
    table.add_row("layout_layer_gap", str(settings.layout_layer_gap))
    table.add_row("layout_min_width", str(settings.layout_min_width))
    table.add_row("layout_slot_width", str(settings.layout_slot_width))

    console.print(table)


if __name__ == "__main__":
    app()
