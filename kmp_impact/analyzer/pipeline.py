"""Run a complete impact analysis: extract, detect, link, aggregate."""
import logging
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Sequence, Tuple

from .graph_builder import DependencyGraph
from .impact_calculator import DEFAULT_TOP_N, ImpactCalculator
from .models import ImpactAnalysis
from .platforms import Platform
from .project_detector import ProjectDetector
from .symbol_extractor import SymbolSource, extract_shared_symbols
from .usage_detector import UsageDetector
from ..errors import ProjectNotFoundError
from ..utils.file_utils import read_source

logger = logging.getLogger(__name__)


def run_analysis(shared_files: Sequence[str],
                 app_files: Mapping[Platform, Sequence[str]],
                 read_file: Callable[[str], str] = read_source,
                 top_n: int = DEFAULT_TOP_N,
                 extractor: SymbolSource = None) -> ImpactAnalysis:
    """Analyze already-discovered files.

    Every collaborator is created fresh, nothing survives the call.

    Args:
        shared_files: Shared-module source files
        app_files: Platform -> app source files
        read_file: File content accessor
        top_n: How many top symbols to keep per platform
        extractor: Symbol source (defaults to the regex extractor)

    Returns:
        Aggregate impact result

    Raises:
        OSError: If a shared file cannot be read, or any file while building the graph
    """
    # Step 1: shared symbols
    symbols = extract_shared_symbols(shared_files, extractor, read_file)

    # Step 2: direct usage in app code
    detector = UsageDetector(read_file)
    symbol_usages = detector.detect(app_files, symbols)
    direct_files = detector.affected_files(symbol_usages)

    # Step 3: dependency graph and transitive impact
    all_files: List[str] = [str(f) for f in shared_files]
    for files in app_files.values():
        all_files.extend(str(f) for f in files)

    graph = DependencyGraph(read_file)
    graph.build(all_files)
    transitive_files = graph.compute_transitive_impact(direct_files)
    logger.info("Found %d transitively impacted files", len(transitive_files))

    # Step 4: metrics
    calculator = ImpactCalculator(read_file, top_n=top_n)
    return calculator.aggregate(symbols, app_files, symbol_usages, direct_files, transitive_files)


def discover_files(project_path: str | Path, max_depth: int = 5,
                   excluded_dirs=None) -> Tuple[List[str], Dict[Platform, List[str]]]:
    """Find shared files and per-platform app files under project_path."""
    detector = ProjectDetector(project_path, max_depth=max_depth, excluded_dirs=excluded_dirs)
    projects = detector.detect_all_projects()
    shared_files = detector.find_shared_files(projects)
    app_files = detector.find_app_files(projects, shared_files)
    return shared_files, app_files


def analyze_project(project_path: str | Path, top_n: int = DEFAULT_TOP_N,
                    max_depth: int = 5, excluded_dirs=None) -> ImpactAnalysis:
    """Discover files under project_path and run the analysis.

    Raises:
        ProjectNotFoundError: If project_path does not exist
    """
    project_path = Path(project_path)
    if not project_path.exists():
        raise ProjectNotFoundError(f"Project path does not exist: {project_path}")

    logger.info("Starting impact analysis for project: %s", project_path)
    shared_files, app_files = discover_files(project_path, max_depth, excluded_dirs)
    logger.info("Found %d KMP files and %d platform(s) with app files", len(shared_files), len(app_files))

    return run_analysis(shared_files, app_files, top_n=top_n)
