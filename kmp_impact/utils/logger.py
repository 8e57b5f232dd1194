"""Logging setup and terminal-safe text for the impact analyzer.

Rich renders box-drawing characters and a few icons in the report tables.
On terminals that cannot encode UTF-8 they are swapped for ASCII.
"""
import locale
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"

ICON_MAP = {
    # Status
    '✓': '[OK]',
    '✔': '[OK]',
    '✗': '[FAIL]',
    '⚠': '[WARN]',

    # Arrows used in dependency listings
    '→': '->',
    '←': '<-',
    '⇒': '=>',

    # Box drawing
    '│': '|',
    '─': '-',
    '┌': '+',
    '┐': '+',
    '└': '+',
    '┘': '+',
    '├': '+',
    '┤': '+',
    '┬': '+',
    '┴': '+',
    '┼': '+',

    # Misc
    '…': '...',
    '•': '*',
}


def detect_terminal_encoding() -> str:
    """Encoding of stdout, falling back to the locale, then ascii."""
    encoding = getattr(sys.stdout, 'encoding', None)
    if encoding:
        return encoding.lower()

    preferred = locale.getpreferredencoding(False)
    if preferred:
        return preferred.lower()

    return 'ascii'


def is_utf8_capable() -> bool:
    return detect_terminal_encoding().replace('_', '-') in ('utf-8', 'utf8')


def sanitize_for_terminal(text: str) -> str:
    """Replace known Unicode characters with ASCII when the terminal lacks UTF-8.

    Args:
        text: Text possibly holding icons or box characters

    Returns:
        Text safe to print on the current terminal
    """
    if is_utf8_capable():
        return text

    for unicode_char, ascii_replacement in ICON_MAP.items():
        text = text.replace(unicode_char, ascii_replacement)
    return text


def setup_logging(verbose: bool = False) -> None:
    """Route the analyzer's log records to a Rich handler on stderr.

    Without verbose only warnings are shown, so reports written to stdout
    stay clean; verbose lowers the level to DEBUG.

    Args:
        verbose: Show info and debug records
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger("kmp_impact")
    root.handlers = [handler]
    root.setLevel(level)
    root.propagate = False
