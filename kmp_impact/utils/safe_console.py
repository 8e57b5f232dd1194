"""Rich Console that degrades to ASCII on terminals without UTF-8."""
from typing import Any

from rich import box
from rich.console import Console

from .logger import is_utf8_capable, sanitize_for_terminal


class SafeConsole(Console):
    """Console whose printed strings pass through sanitize_for_terminal.

    Tables should use ``console.table_box`` so their borders stay readable
    when Unicode box characters are not available.
    """

    def __init__(self, *args, **kwargs):
        self._needs_sanitization = not is_utf8_capable()
        if self._needs_sanitization:
            kwargs.setdefault('legacy_windows', True)
        super().__init__(*args, **kwargs)

    @property
    def table_box(self) -> box.Box:
        return box.ASCII if self._needs_sanitization else box.ROUNDED

    def print(self, *objects: Any, **kwargs) -> None:
        if self._needs_sanitization:
            objects = tuple(
                sanitize_for_terminal(obj) if isinstance(obj, str) else obj
                for obj in objects
            )
        super().print(*objects, **kwargs)
