"""Lexical extraction of public declarations from shared Kotlin sources.

No parser is involved: declarations are recognised by keyword patterns
anchored at the start of a line. Type names must be capitalized, function
and property names lowercase-first.

Known limitation: a file that mentions ``internal `` anywhere, or that starts
with ``private ``, is treated as non-public and skipped entirely. This gives
false negatives (a public class in a file with one internal helper).
"""
import logging
import re
from pathlib import Path
from typing import Callable, Iterable, List, Protocol, Tuple

from .models import Symbol, SymbolKind
from ..utils.file_utils import read_source

logger = logging.getLogger(__name__)

_PUBLIC = r'(?:public\s+)?'
_TYPE_NAME = r'([A-Z][a-zA-Z0-9_]*)'
_MEMBER_NAME = r'([a-z][a-zA-Z0-9_]*)'
_MULTIPLATFORM = r'(?:(?:expect|actual)\s+)?'


class SymbolSource(Protocol):
    """Anything able to turn file content into symbols.

    Lets a parser-backed implementation replace the regex extractor without
    touching the graph or impact code.
    """

    def extract(self, content: str, file_path: str, module: str) -> List[Symbol]:
        ...


class SymbolExtractor:
    """Extract public symbols from KMP source code using regex heuristics."""

    # Extraction order is also the order of the returned list
    PATTERNS: Tuple[Tuple[SymbolKind, str], ...] = (
        (SymbolKind.CLASS,
         rf'^\s*{_PUBLIC}{_MULTIPLATFORM}'
         rf'(?:(?:data|sealed|abstract|open|enum|annotation|value)\s+)?class\s+{_TYPE_NAME}'),
        (SymbolKind.INTERFACE,
         rf'^\s*{_PUBLIC}{_MULTIPLATFORM}(?:(?:sealed|fun)\s+)?interface\s+{_TYPE_NAME}'),
        (SymbolKind.SINGLETON,
         rf'^\s*{_PUBLIC}{_MULTIPLATFORM}(?:data\s+)?object\s+{_TYPE_NAME}'),
        (SymbolKind.FUNCTION,
         rf'^\s*{_PUBLIC}{_MULTIPLATFORM}(?:(?:suspend|inline|operator|infix)\s+)*'
         rf'fun\s+{_MEMBER_NAME}\s*\('),
        (SymbolKind.PROPERTY,
         rf'^\s*{_PUBLIC}{_MULTIPLATFORM}(?:(?:const|lateinit)\s+)?(?:val|var)\s+'
         rf'{_MEMBER_NAME}\s*[:=]'),
        (SymbolKind.TYPE_ALIAS,
         rf'^\s*{_PUBLIC}{_MULTIPLATFORM}typealias\s+{_TYPE_NAME}'),
    )

    def __init__(self):
        self._compiled = [
            (kind, re.compile(pattern, re.MULTILINE))
            for kind, pattern in self.PATTERNS
        ]

    def extract(self, content: str, file_path: str, module: str) -> List[Symbol]:
        """Extract symbols from already-loaded content.

        Args:
            content: Source text of a shared-module file
            file_path: Path recorded on each symbol
            module: Owning module name

        Returns:
            Symbols grouped by kind (classes first, type aliases last)
        """
        if self.is_private_file(content):
            logger.debug("Skipping non-public file %s", file_path)
            return []

        symbols = []
        for kind, regex in self._compiled:
            for match in regex.finditer(content):
                symbols.append(Symbol(
                    name=match.group(1),
                    kind=kind,
                    module=module,
                    file_path=file_path,
                    is_public=True,
                ))
        return symbols

    def extract_symbols(self, file_path: str | Path, module: str) -> List[Symbol]:
        """Read a file and extract its symbols.

        Raises:
            OSError: If the file cannot be read
        """
        content = read_source(file_path)
        return self.extract(content, str(file_path), module)

    @staticmethod
    def is_private_file(content: str) -> bool:
        """File-level privacy heuristic (see module docstring)."""
        return 'internal ' in content or content.startswith('private ')


def determine_module_name(file_path: str) -> str:
    """Module name is the directory right before ``/src/`` in the path."""
    normalized = str(file_path).replace('\\', '/')
    idx = normalized.find('/src/')
    if idx == -1:
        return "unknown"
    before_src = normalized[:idx]
    return before_src.rsplit('/', 1)[-1]


def extract_shared_symbols(file_paths: Iterable[str],
                           extractor: SymbolSource = None,
                           read_file: Callable[[str], str] = read_source) -> List[Symbol]:
    """Extract symbols from every shared-module file.

    Fails fast: the first unreadable file aborts the whole extraction.

    Args:
        file_paths: Shared-module source files
        extractor: Symbol source to use (defaults to the regex extractor)
        read_file: File content accessor

    Returns:
        Symbols of all files, file by file
    """
    extractor = extractor or SymbolExtractor()
    file_paths = list(file_paths)
    logger.info("Extracting symbols from %d shared files", len(file_paths))

    symbols = []
    for file_path in file_paths:
        content = read_file(file_path)
        symbols.extend(extractor.extract(content, str(file_path), determine_module_name(file_path)))

    logger.info("Extracted %d symbols", len(symbols))
    return symbols
