"""kmp-impact CLI - measure how much platform app code depends on shared KMP code."""
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from kmp_impact.analyzer.graph_builder import DependencyGraph
from kmp_impact.analyzer.pipeline import discover_files, run_analysis
from kmp_impact.analyzer.symbol_extractor import extract_shared_symbols
from kmp_impact.config import __version__, get_config
from kmp_impact.errors import UnsupportedFormatError
from kmp_impact.reporting.reporter import Reporter
from kmp_impact.utils.logger import setup_logging
from kmp_impact.utils.safe_console import SafeConsole

app = typer.Typer(
    name="kmp-impact",
    help="Measure the impact of shared Kotlin Multiplatform code on Android and iOS apps",
    add_completion=False
)
console = SafeConsole()
logger = logging.getLogger(__name__)


def _resolve_project(project_path: str) -> Path:
    """Resolve the path argument, exiting with an error when it does not exist."""
    path = Path(project_path).resolve()
    if not path.exists():
        console.print(f"[bold red]Error:[/bold red] Project path does not exist: {escape(str(path))}")
        raise typer.Exit(1)
    return path


def _discover(project_path: Path):
    config = get_config()
    return discover_files(project_path, max_depth=config.max_depth, excluded_dirs=config.excluded_dirs)


@app.command()
def analyze(
    project_path: str = typer.Argument(".", help="Project root path to analyze"),
    output_format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: table, json or markdown"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the report to this file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed progress logs"),
    top: Optional[int] = typer.Option(None, "--top", "-t", min=1, help="Top symbols listed per platform"),
):
    """Analyze a monorepo and report the shared-code impact coverage."""
    setup_logging(verbose)
    config = get_config()

    try:
        reporter = Reporter(output_format or config.output_format, console=console)
    except UnsupportedFormatError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    project_path = _resolve_project(project_path)

    try:
        top_n = top if top is not None else config.top_n
        with console.status("Analyzing KMP impact..."):
            shared_files, app_files = _discover(project_path)
            if not shared_files:
                logger.warning("No shared KMP source files found under %s", project_path)
            analysis = run_analysis(shared_files, app_files, top_n=top_n)
        reporter.report(analysis, output)
    except (OSError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def symbols(
    project_path: str = typer.Argument(".", help="Project root path to analyze"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed progress logs"),
):
    """List the public symbols extracted from the shared module."""
    setup_logging(verbose)
    project_path = _resolve_project(project_path)

    try:
        shared_files, _ = _discover(project_path)
        extracted = extract_shared_symbols(shared_files)
    except (OSError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if not extracted:
        console.print("[bold yellow]No shared symbols found.[/bold yellow]")
        return

    table = Table(title="Shared KMP Symbols", box=console.table_box)
    table.add_column("Symbol", style="cyan")
    table.add_column("Kind", style="yellow")
    table.add_column("Module", style="green")
    table.add_column("File", style="magenta", no_wrap=False)

    for symbol in extracted:
        try:
            display_path = Path(symbol.file_path).relative_to(project_path)
        except ValueError:
            display_path = symbol.file_path
        table.add_row(escape(symbol.name), symbol.kind.value, escape(symbol.module), escape(str(display_path)))

    console.print(table)
    console.print(f"\n[bold]Total symbols:[/bold] {len(extracted)}")


@app.command()
def graph(
    project_path: str = typer.Argument(".", help="Project root path to analyze"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed progress logs"),
):
    """Print statistics of the file dependency graph."""
    setup_logging(verbose)
    project_path = _resolve_project(project_path)

    try:
        shared_files, app_files = _discover(project_path)
        all_files = list(shared_files)
        for files in app_files.values():
            all_files.extend(files)
        dependency_graph = DependencyGraph()
        dependency_graph.build(all_files)
    except (OSError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    stats = dependency_graph.get_stats()
    table = Table(title="Dependency Graph", show_header=True, header_style="bold cyan", box=console.table_box)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right", style="green")

    table.add_row("Files", str(stats.total_files))
    table.add_row("Import Edges", str(stats.total_edges))
    table.add_row("Max Dependencies (one file)", str(stats.max_dependencies))
    table.add_row("Max Dependents (one file)", str(stats.max_dependents))

    console.print(table)


def _version_callback(value: bool):
    if value:
        console.print(f"kmp-impact {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True,
                                 help="Show the version and exit"),
):
    """kmp-impact - Kotlin Multiplatform impact coverage analyzer."""


if __name__ == "__main__":
    app()
