"""Detect textual usage of shared symbols inside platform app files.

Matching is line based: comment and import lines are recognised by prefix
only, and each remaining line is tested against every candidate symbol name.
The cost is O(lines x symbols) per file; a single combined alternation is used
to skip lines that mention no candidate name at all.
"""
import logging
import re
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from .models import Symbol, SymbolUsage, UsageOccurrence
from .platforms import Platform, detect_language
from ..utils.file_utils import read_source

logger = logging.getLogger(__name__)

# Symbol name must be followed by a call, member access, type annotation,
# generic argument list, whitespace or the end of the line.
USAGE_PATTERN = r'\b{name}\b(?:\s*\(|\.|\s*:|<|\s+|$)'


def compile_usage_pattern(symbol_name: str) -> Optional[re.Pattern]:
    """Compile the boundary-aware pattern for one symbol.

    Returns:
        Compiled pattern, or None if the generated pattern is invalid
    """
    try:
        return re.compile(USAGE_PATTERN.format(name=re.escape(symbol_name)))
    except re.error as exc:
        # names are escaped, only a malformed USAGE_PATTERN gets here
        logger.debug("Skipping symbol %r: invalid pattern (%s)", symbol_name, exc)
        return None


def _build_prefilter(symbol_names: Iterable[str]) -> Optional[re.Pattern]:
    names = sorted({name for name in symbol_names if name}, key=len, reverse=True)
    if not names:
        return None
    return re.compile('|'.join(re.escape(name) for name in names))


def detect_usage_with_patterns(content: str, file_path: str,
                               symbol_names: Sequence[str],
                               comment_prefixes: Sequence[str]) -> Dict[str, SymbolUsage]:
    """Find symbol usages in one file's content.

    Args:
        content: File content
        file_path: Path recorded on each usage
        symbol_names: Candidate symbol names
        comment_prefixes: Line prefixes marking comment/import lines

    Returns:
        Mapping symbol name -> aggregated usage, only for symbols that matched
    """
    usages: Dict[str, SymbolUsage] = {}
    prefixes = tuple(comment_prefixes)

    patterns = []
    for name in dict.fromkeys(symbol_names):
        regex = compile_usage_pattern(name)
        if regex is not None:
            patterns.append((name, regex))

    prefilter = _build_prefilter(name for name, _ in patterns)
    if prefilter is None:
        return usages

    for line_number, line in enumerate(content.splitlines(), start=1):
        trimmed = line.strip()

        if trimmed.startswith(prefixes):
            continue
        if not prefilter.search(line):
            continue

        for name, regex in patterns:
            if regex.search(line):
                usage = usages.get(name)
                if usage is None:
                    usage = usages[name] = SymbolUsage(symbol_name=name)
                usage.record(file_path, line_number, trimmed)

    return usages


def skip_prefixes_for(file_path: str, platform: Platform) -> Tuple[str, ...]:
    """Non-code line prefixes for a file, by its language when known."""
    language = detect_language(file_path)
    if language is None:
        return platform.skip_prefixes
    return language.skip_prefixes


class UsageDetector:
    """Detect where shared symbols are used across all platform app files."""

    def __init__(self, read_file: Callable[[str], str] = read_source):
        self.read_file = read_file

    def detect_file(self, file_path: str, platform: Platform,
                    symbol_names: Sequence[str]) -> List[UsageOccurrence]:
        """Detect usages in a single app file.

        Raises:
            OSError: If the file cannot be read
        """
        content = self.read_file(file_path)
        usages = detect_usage_with_patterns(content, file_path, symbol_names,
                                            skip_prefixes_for(file_path, platform))

        occurrences = []
        for usage in usages.values():
            occurrences.extend(usage.usage_lines)
        return occurrences

    def detect(self, app_files: Mapping[Platform, Sequence[str]],
               symbols: Sequence[Symbol]) -> Dict[str, List[UsageOccurrence]]:
        """Detect usages of all symbols across all platforms.

        Unreadable files are logged and skipped.

        Args:
            app_files: Platform -> app file paths
            symbols: Extracted shared symbols

        Returns:
            Symbol name -> every usage occurrence found
        """
        logger.info("Detecting symbol usage across platforms")
        symbol_names = list(dict.fromkeys(symbol.name for symbol in symbols))

        all_usages: Dict[str, List[UsageOccurrence]] = {}
        for platform, file_paths in app_files.items():
            logger.info("Analyzing %d %s files", len(file_paths), platform.display_name)

            for file_path in file_paths:
                try:
                    occurrences = self.detect_file(str(file_path), platform, symbol_names)
                except OSError as exc:
                    logger.warning("Skipping unreadable file %s: %s", file_path, exc)
                    continue

                for occurrence in occurrences:
                    all_usages.setdefault(occurrence.symbol_name, []).append(occurrence)

        total = sum(len(occurrences) for occurrences in all_usages.values())
        logger.info("Found %d total symbol usages", total)
        return all_usages

    @staticmethod
    def affected_files(symbol_usages: Mapping[str, List[UsageOccurrence]]) -> Set[str]:
        """Files that directly reference at least one shared symbol."""
        return {
            occurrence.file_path
            for occurrences in symbol_usages.values()
            for occurrence in occurrences
        }
