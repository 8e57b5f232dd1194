"""Exception types raised by the analyzer."""


class KmpImpactError(Exception):
    """Base class for analyzer errors."""


class GraphAlreadyBuiltError(KmpImpactError):
    """Raised when build() is called on a dependency graph that is already built."""


class UnsupportedFormatError(KmpImpactError):
    """Raised when a report format is not one of table, json or markdown."""

    def __init__(self, format_name: str):
        super().__init__(f"Unsupported output format: {format_name}")
        self.format_name = format_name


class ProjectNotFoundError(KmpImpactError):
    """Raised when the project path to analyze does not exist."""
