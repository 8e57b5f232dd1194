"""Data model shared by the extractor, detector, graph and calculator."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Set, Tuple


class SymbolKind(str, Enum):
    """Kind of public declaration found in shared code."""
    CLASS = "Class"
    INTERFACE = "Interface"
    SINGLETON = "Singleton"  # Kotlin `object`
    FUNCTION = "Function"
    PROPERTY = "Property"
    TYPE_ALIAS = "TypeAlias"


@dataclass(frozen=True)
class Symbol:
    """A public declaration in a shared-module file.

    Identity is (name, file_path); the same name may be declared in
    several files.
    """
    name: str
    kind: SymbolKind
    module: str
    file_path: str
    is_public: bool = True

    @property
    def key(self) -> Tuple[str, str]:
        return (self.name, self.file_path)


@dataclass
class UsageOccurrence:
    """One textual reference to a symbol."""
    symbol_name: str
    file_path: str
    line_number: int
    context: str


@dataclass
class SymbolUsage:
    """Aggregated usage of one symbol within the scanned content."""
    symbol_name: str
    reference_count: int = 0
    used_in_files: Set[str] = field(default_factory=set)
    usage_lines: List[UsageOccurrence] = field(default_factory=list)

    def record(self, file_path: str, line_number: int, context: str):
        self.reference_count += 1
        self.used_in_files.add(file_path)
        self.usage_lines.append(UsageOccurrence(
            symbol_name=self.symbol_name,
            file_path=file_path,
            line_number=line_number,
            context=context,
        ))


def impact_ratio(affected_lines: int, total_lines: int) -> float:
    """Return affected/total, or 0.0 when there are no lines at all."""
    if total_lines <= 0:
        return 0.0
    return affected_lines / total_lines


@dataclass
class PlatformImpact:
    """Impact figures for a single platform."""
    platform_name: str
    total_files: int = 0
    total_lines: int = 0
    affected_files: Set[str] = field(default_factory=set)  # direct impact only
    transitive_files: Set[str] = field(default_factory=set)
    affected_lines: int = 0
    impact_ratio: float = 0.0
    top_symbols: List[Tuple[str, int]] = field(default_factory=list)

    def calculate_impact_ratio(self):
        self.impact_ratio = impact_ratio(self.affected_lines, self.total_lines)

    def to_dict(self) -> Dict:
        return {
            'platform_name': self.platform_name,
            'total_files': self.total_files,
            'total_lines': self.total_lines,
            'affected_files': sorted(self.affected_files),
            'transitive_files': sorted(self.transitive_files),
            'affected_lines': self.affected_lines,
            'impact_ratio': self.impact_ratio,
            'top_symbols': [list(item) for item in self.top_symbols],
        }


@dataclass
class ImpactAnalysis:
    """Aggregate result handed to the reporting layer."""
    total_symbols: int = 0
    total_app_files: int = 0
    total_app_lines: int = 0
    affected_files: Set[str] = field(default_factory=set)
    transitive_files: Set[str] = field(default_factory=set)
    affected_lines: int = 0
    impact_ratio: float = 0.0
    platform_impacts: Dict[str, PlatformImpact] = field(default_factory=dict)
    symbol_usages: Dict[str, List[UsageOccurrence]] = field(default_factory=dict)
    symbols: List[Symbol] = field(default_factory=list)

    def calculate_impact_ratio(self):
        self.impact_ratio = impact_ratio(self.affected_lines, self.total_app_lines)

    def kind_breakdown(self) -> Dict[str, int]:
        """Count extracted symbols per kind, in SymbolKind declaration order."""
        counts = {kind.value: 0 for kind in SymbolKind}
        for symbol in self.symbols:
            counts[symbol.kind.value] += 1
        return counts

    def ranked_symbols(self, limit: int = 10) -> List[Tuple[str, int, int]]:
        """Return (name, references, files) sorted by references, then name."""
        ranked = [
            (name, len(occurrences), len({o.file_path for o in occurrences}))
            for name, occurrences in self.symbol_usages.items()
        ]
        ranked.sort(key=lambda item: (-item[1], item[0]))
        return ranked[:limit]

    def to_dict(self) -> Dict:
        """JSON-ready representation (sets become sorted lists)."""
        return {
            'total_symbols': self.total_symbols,
            'total_app_files': self.total_app_files,
            'total_app_lines': self.total_app_lines,
            'affected_files': sorted(self.affected_files),
            'transitive_files': sorted(self.transitive_files),
            'affected_lines': self.affected_lines,
            'impact_ratio': self.impact_ratio,
            'platform_impacts': {
                name: impact.to_dict()
                for name, impact in sorted(self.platform_impacts.items())
            },
            'symbol_usages': {
                name: [
                    {
                        'file_path': o.file_path,
                        'line_number': o.line_number,
                        'context': o.context,
                    }
                    for o in occurrences
                ]
                for name, occurrences in sorted(self.symbol_usages.items())
            },
            'symbol_kinds': self.kind_breakdown(),
        }
