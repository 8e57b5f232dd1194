"""Platform variants (Android, iOS) and their lexical conventions.

Each platform is a tag carrying its file extensions, the line prefixes that
mark non-code lines for usage detection, the directories where app code
usually lives, and its code-line counting rule.
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


# Prefixes that make a line a comment for line counting
COMMENT_PREFIXES = ('//', '/*', '*')


@dataclass(frozen=True)
class PlatformTraits:
    extensions: Tuple[str, ...]
    skip_prefixes: Tuple[str, ...]  # comment + import lines ignored by usage detection
    app_directory_patterns: Tuple[str, ...]


class Platform(str, Enum):
    """Closed set of supported application platforms."""
    ANDROID = "Android"
    IOS = "iOS"

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def traits(self) -> PlatformTraits:
        return _TRAITS[self]

    @property
    def extensions(self) -> Tuple[str, ...]:
        return self.traits.extensions

    @property
    def skip_prefixes(self) -> Tuple[str, ...]:
        return self.traits.skip_prefixes

    @property
    def app_directory_patterns(self) -> Tuple[str, ...]:
        return self.traits.app_directory_patterns

    def is_platform_file(self, path: str | Path) -> bool:
        """Check whether the file extension belongs to this platform."""
        return Path(path).suffix.lstrip('.') in self.extensions

    def count_code_lines(self, content: str) -> int:
        """Count non-blank lines that are not comment lines.

        Kotlin, Java, Swift and Objective-C share C-style comment syntax,
        so one rule serves every platform.
        """
        return count_code_lines(content)


_TRAITS = {
    Platform.ANDROID: PlatformTraits(
        extensions=('kt', 'kts', 'java'),
        skip_prefixes=('//', '/*', '*', 'import '),
        app_directory_patterns=(
            'app/src',
            'android/src',
            'androidApp/src',
            'composeApp/src/androidMain',
        ),
    ),
    Platform.IOS: PlatformTraits(
        extensions=('swift', 'm', 'mm', 'h'),
        skip_prefixes=('//', '/*', '*', 'import ', '#import'),
        app_directory_patterns=(
            'iosApp',
            'iosApp/iosApp',
            'ios',
            'iOS',
            'composeApp/src/iosMain',
        ),
    ),
}


class Language(str, Enum):
    KOTLIN = "Kotlin"
    JAVA = "Java"
    SWIFT = "Swift"
    OBJECTIVE_C = "Objective-C"

    @property
    def skip_prefixes(self) -> Tuple[str, ...]:
        """Comment and import line prefixes for this language."""
        if self is Language.OBJECTIVE_C:
            return COMMENT_PREFIXES + ('#import', '#include', '@import')
        return COMMENT_PREFIXES + ('import ',)


LANGUAGE_BY_EXTENSION = {
    '.kt': Language.KOTLIN,
    '.kts': Language.KOTLIN,
    '.java': Language.JAVA,
    '.swift': Language.SWIFT,
    '.m': Language.OBJECTIVE_C,
    '.mm': Language.OBJECTIVE_C,
    '.h': Language.OBJECTIVE_C,
}


def count_code_lines(content: str) -> int:
    """Count non-blank, non-comment lines in source content."""
    count = 0
    for line in content.splitlines():
        trimmed = line.strip()
        if trimmed and not trimmed.startswith(COMMENT_PREFIXES):
            count += 1
    return count


def detect_language(path: str | Path) -> Optional[Language]:
    return LANGUAGE_BY_EXTENSION.get(Path(path).suffix.lower())
