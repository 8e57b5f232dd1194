"""Aggregate direct and transitive impact into line-based coverage ratios."""
import logging
from collections import Counter
from typing import Callable, Dict, Iterable, List, Mapping, Sequence, Set, Tuple

from .models import ImpactAnalysis, PlatformImpact, Symbol, UsageOccurrence
from .platforms import Platform
from ..utils.file_utils import read_source

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 10


class ImpactCalculator:
    """Compute per-platform and overall impact figures."""

    def __init__(self, read_file: Callable[[str], str] = read_source, top_n: int = DEFAULT_TOP_N):
        self.read_file = read_file
        self.top_n = top_n
        self._line_counts: Dict[Tuple[Platform, str], int] = {}

    def count_file_lines(self, file_path: str, platform: Platform) -> int:
        """Code lines of one file; unreadable files count as zero."""
        key = (platform, file_path)
        if key not in self._line_counts:
            try:
                content = self.read_file(file_path)
            except OSError as exc:
                logger.warning("Cannot count lines of %s: %s", file_path, exc)
                self._line_counts[key] = 0
            else:
                self._line_counts[key] = platform.count_code_lines(content)
        return self._line_counts[key]

    def top_symbols(self, symbol_usages: Mapping[str, Sequence[UsageOccurrence]],
                    platform_files: Set[str]) -> List[Tuple[str, int]]:
        """Most used symbols within one platform's files.

        Sorted by count (descending), then name (ascending), truncated to top_n.
        """
        counts = Counter()
        for symbol_name, occurrences in symbol_usages.items():
            count = sum(1 for o in occurrences if o.file_path in platform_files)
            if count > 0:
                counts[symbol_name] = count

        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return ranked[:self.top_n]

    def calculate_platform_impact(self, platform: Platform, files: Sequence[str],
                                  symbol_usages: Mapping[str, Sequence[UsageOccurrence]],
                                  direct_files: Set[str],
                                  transitive_files: Set[str]) -> PlatformImpact:
        platform_files = {str(f) for f in files}
        impact = PlatformImpact(platform_name=platform.display_name)
        impact.total_files = len(platform_files)
        impact.total_lines = sum(self.count_file_lines(f, platform) for f in platform_files)

        impact.affected_files = platform_files & direct_files
        impact.transitive_files = (platform_files & transitive_files) - impact.affected_files

        affected = impact.affected_files | impact.transitive_files
        impact.affected_lines = sum(self.count_file_lines(f, platform) for f in affected)

        impact.top_symbols = self.top_symbols(symbol_usages, platform_files)
        impact.calculate_impact_ratio()
        return impact

    def calculate_platform_impacts(self, app_files: Mapping[Platform, Sequence[str]],
                                   symbol_usages: Mapping[str, Sequence[UsageOccurrence]],
                                   direct_files: Iterable[str],
                                   transitive_files: Iterable[str]) -> Dict[Platform, PlatformImpact]:
        """Compute impact for every platform.

        Args:
            app_files: Platform -> app file paths
            symbol_usages: Symbol name -> usage occurrences
            direct_files: Files directly using shared symbols
            transitive_files: Files impacted only through imports

        Returns:
            Platform -> PlatformImpact
        """
        direct = set(direct_files)
        transitive = set(transitive_files)
        return {
            platform: self.calculate_platform_impact(platform, files, symbol_usages, direct, transitive)
            for platform, files in app_files.items()
        }

    def aggregate(self, symbols: Sequence[Symbol],
                  app_files: Mapping[Platform, Sequence[str]],
                  symbol_usages: Dict[str, List[UsageOccurrence]],
                  direct_files: Iterable[str],
                  transitive_files: Iterable[str]) -> ImpactAnalysis:
        """Build the overall result by summing the platform figures."""
        direct = set(direct_files)
        transitive = set(transitive_files)
        platform_impacts = self.calculate_platform_impacts(app_files, symbol_usages, direct, transitive)

        analysis = ImpactAnalysis(
            total_symbols=len(symbols),
            total_app_files=sum(impact.total_files for impact in platform_impacts.values()),
            total_app_lines=sum(impact.total_lines for impact in platform_impacts.values()),
            affected_files=direct,
            transitive_files=transitive - direct,
            affected_lines=sum(impact.affected_lines for impact in platform_impacts.values()),
            platform_impacts={
                platform.display_name: impact
                for platform, impact in platform_impacts.items()
            },
            symbol_usages=symbol_usages,
            symbols=list(symbols),
        )
        analysis.calculate_impact_ratio()

        logger.info("Impact analysis complete: %.2f%% impact coverage", analysis.impact_ratio * 100)
        return analysis
