"""Render an ImpactAnalysis as a console table, JSON or Markdown."""
import io
import json
import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..analyzer.models import ImpactAnalysis
from ..errors import UnsupportedFormatError
from ..utils.safe_console import SafeConsole

logger = logging.getLogger(__name__)

TOP_SYMBOLS_SHOWN = 10


class ReportFormat(str, Enum):
    TABLE = "table"
    JSON = "json"
    MARKDOWN = "markdown"

    @classmethod
    def parse(cls, name: str) -> "ReportFormat":
        """Case-insensitive lookup; ``md`` is accepted for markdown.

        Raises:
            UnsupportedFormatError: For any other name
        """
        normalized = (name or "").strip().lower()
        if normalized == "md":
            return cls.MARKDOWN
        try:
            return cls(normalized)
        except ValueError:
            raise UnsupportedFormatError(name)


def _percent(ratio: float) -> str:
    return f"{ratio * 100:.2f}%"


class Reporter:
    """Format and emit analysis results."""

    def __init__(self, format_name: str = "table", console: Console = None):
        self.format = ReportFormat.parse(format_name)
        self.console = console or SafeConsole()

    # ------------------------------------------------------------------
    # Table (rich)
    # ------------------------------------------------------------------

    def build_tables(self, analysis: ImpactAnalysis) -> Group:
        """Rich renderables for the console report."""
        box_style = getattr(self.console, 'table_box', None)
        parts: List = []

        summary = Text()
        summary.append("Impact Coverage: ", style="bold")
        summary.append(_percent(analysis.impact_ratio), style="bold green")
        summary.append(f"\n  Affected Lines: {analysis.affected_lines} / {analysis.total_app_lines}")
        summary.append(f"\nDirect Impact: {len(analysis.affected_files)} files")
        summary.append(f"\nTransitive Impact: {len(analysis.transitive_files)} files")
        summary.append(f"\nKMP Symbols: {analysis.total_symbols}")
        summary.append(f"\nTotal App Files: {analysis.total_app_files}")
        parts.append(Panel(summary, title="KMP Impact Coverage Report", border_style="blue", expand=False))

        if analysis.platform_impacts:
            table = Table(title="Platform Impact Breakdown", show_header=True, header_style="bold magenta")
            if box_style is not None:
                table.box = box_style
            table.add_column("Platform", style="cyan")
            table.add_column("Impact %", justify="right", style="green")
            table.add_column("Affected Files", justify="right")
            table.add_column("Transitive Files", justify="right")
            table.add_column("Affected Lines", justify="right")
            table.add_column("Total Lines", justify="right")
            for name, impact in sorted(analysis.platform_impacts.items()):
                table.add_row(
                    escape(name),
                    _percent(impact.impact_ratio),
                    str(len(impact.affected_files)),
                    str(len(impact.transitive_files)),
                    str(impact.affected_lines),
                    str(impact.total_lines),
                )
            parts.append(table)

        ranked = analysis.ranked_symbols(TOP_SYMBOLS_SHOWN)
        if ranked:
            table = Table(title=f"Top {TOP_SYMBOLS_SHOWN} Used KMP Symbols", show_header=True,
                          header_style="bold magenta")
            if box_style is not None:
                table.box = box_style
            table.add_column("Symbol", style="cyan")
            table.add_column("References", justify="right", style="yellow")
            table.add_column("Used in Files", justify="right")
            for name, references, files in ranked:
                table.add_row(escape(name), str(references), str(files))
            parts.append(table)

        kinds = Table(title="KMP Symbol Breakdown", show_header=True, header_style="bold magenta")
        if box_style is not None:
            kinds.box = box_style
        kinds.add_column("Kind", style="cyan")
        kinds.add_column("Count", justify="right", style="yellow")
        for kind, count in analysis.kind_breakdown().items():
            kinds.add_row(kind, str(count))
        parts.append(kinds)

        return Group(*parts)

    def format_as_table(self, analysis: ImpactAnalysis) -> str:
        """Plain-text rendering of the rich tables (used when writing to a file)."""
        buffer = io.StringIO()
        plain = Console(file=buffer, width=100, color_system=None, force_terminal=False)
        plain.print(self.build_tables(analysis))
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # JSON / Markdown
    # ------------------------------------------------------------------

    def format_as_json(self, analysis: ImpactAnalysis) -> str:
        return json.dumps(analysis.to_dict(), indent=2)

    def format_as_markdown(self, analysis: ImpactAnalysis) -> str:
        lines = ["# Kotlin Multiplatform Impact Coverage Report", ""]

        lines += [
            "## Impact Summary",
            "",
            f"- **Impact Coverage**: {_percent(analysis.impact_ratio)}",
            f"- **Affected Lines**: {analysis.affected_lines} / {analysis.total_app_lines}",
            f"- **Direct Impact Files**: {len(analysis.affected_files)}",
            f"- **Transitive Impact Files**: {len(analysis.transitive_files)}",
            f"- **Total KMP Symbols**: {analysis.total_symbols}",
            "",
        ]

        if analysis.platform_impacts:
            lines += [
                "## Platform Impact Breakdown",
                "",
                "| Platform | Impact % | Affected Files | Transitive Files | Affected Lines | Total Lines |",
                "|----------|----------|----------------|------------------|----------------|-------------|",
            ]
            for name, impact in sorted(analysis.platform_impacts.items()):
                lines.append(
                    f"| {name} | {_percent(impact.impact_ratio)} | {len(impact.affected_files)} "
                    f"| {len(impact.transitive_files)} | {impact.affected_lines} | {impact.total_lines} |"
                )
            lines.append("")

        ranked = analysis.ranked_symbols(TOP_SYMBOLS_SHOWN)
        if ranked:
            lines += [
                "## Top Used KMP Symbols",
                "",
                "| Symbol | References | Used in Files |",
                "|--------|------------|---------------|",
            ]
            for name, references, files in ranked:
                lines.append(f"| {name} | {references} | {files} |")
            lines.append("")

        lines += ["## KMP Symbol Breakdown", ""]
        for kind, count in analysis.kind_breakdown().items():
            lines.append(f"- **{kind}**: {count}")
        lines.append("")

        return "\n".join(lines)

    def render(self, analysis: ImpactAnalysis) -> str:
        if self.format == ReportFormat.JSON:
            return self.format_as_json(analysis)
        if self.format == ReportFormat.MARKDOWN:
            return self.format_as_markdown(analysis)
        return self.format_as_table(analysis)

    def report(self, analysis: ImpactAnalysis, output_path: Optional[str | Path] = None) -> None:
        """Write the report to output_path, or print it to the console.

        Raises:
            OSError: If the output file cannot be written
        """
        if output_path is not None:
            output_path = Path(output_path)
            output_path.write_text(self.render(analysis), encoding='utf-8')
            logger.info("Report written to %s", output_path)
            self.console.print(f"[green]Results saved to file:[/green] {escape(str(output_path))}")
            return

        if self.format == ReportFormat.TABLE:
            self.console.print(self.build_tables(analysis))
        else:
            # Raw text; markup and highlighting would alter JSON/Markdown
            self.console.print(self.render(analysis), markup=False, highlight=False, emoji=False,
                               soft_wrap=True)
