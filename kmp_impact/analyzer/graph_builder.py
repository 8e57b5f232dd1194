"""File-level dependency graph built from package declarations and imports.

Edge (A, B) means "file A imports file B". Impact flows the other way: when
B is impacted, every file with a path to B is impacted as well.
"""
import logging
import re
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set

import networkx as nx

from ..errors import GraphAlreadyBuiltError
from ..utils.file_utils import read_source

logger = logging.getLogger(__name__)


PACKAGE_REGEX = re.compile(r'^package\s+([a-zA-Z0-9_.]+)', re.MULTILINE)
PRIMARY_TYPE_REGEX = re.compile(
    r'^\s*(?:public\s+)?(?:class|interface|object)\s+([A-Z][a-zA-Z0-9_]*)', re.MULTILINE
)
# Kotlin/Java qualified imports and Swift module imports
IMPORT_REGEX = re.compile(r'^import\s+([a-zA-Z0-9_.]+)', re.MULTILINE)
OBJC_IMPORT_REGEX = re.compile(r'^#import\s+[<"]([A-Za-z0-9_/.]+)[>"]', re.MULTILINE)


def extract_package_name(content: str) -> str:
    """Return the declared package, or '' when there is none."""
    match = PACKAGE_REGEX.search(content)
    return match.group(1) if match else ''


def extract_primary_type_name(content: str) -> Optional[str]:
    """Return the first class/interface/object name declared in the file."""
    match = PRIMARY_TYPE_REGEX.search(content)
    return match.group(1) if match else None


def extract_imports(content: str) -> List[str]:
    """Extract import strings from Kotlin, Java, Swift or Objective-C content.

    Objective-C header imports lose their ``.h`` suffix
    (``#import <Shared/Shared.h>`` -> ``Shared/Shared``).
    """
    imports = [match.group(1) for match in IMPORT_REGEX.finditer(content)]
    for match in OBJC_IMPORT_REGEX.finditer(content):
        header = match.group(1)
        if header.endswith('.h'):
            header = header[:-2]
        imports.append(header)
    return imports


@dataclass
class DependencyStats:
    """Summary figures of a built dependency graph."""
    total_files: int
    total_edges: int
    max_dependencies: int
    max_dependents: int


class DependencyGraph:
    """Directed import graph between source files.

    The graph goes from Empty to Built exactly once; create a new instance
    for every analysis run.
    """

    def __init__(self, read_file: Callable[[str], str] = read_source):
        self.read_file = read_file
        self.graph = nx.DiGraph()
        # "package.TypeName" -> defining file
        self.package_map: Dict[str, str] = {}
        self._built = False

    @property
    def is_built(self) -> bool:
        return self._built

    def build(self, files: Iterable[str | Path]) -> nx.DiGraph:
        """Build the graph for the given files.

        Pass 1 indexes ``package.PrimaryType -> file``. Pass 2 resolves each
        file's imports against that index and adds the edges.

        Args:
            files: Every file taking part in the analysis

        Returns:
            The underlying NetworkX DiGraph

        Raises:
            GraphAlreadyBuiltError: If build() was already called
            OSError: If any file cannot be read
        """
        if self._built:
            raise GraphAlreadyBuiltError("Dependency graph is already built; create a new instance")

        file_paths = [str(f) for f in files]
        logger.info("Building dependency graph for %d files", len(file_paths))

        contents: Dict[str, str] = {}
        for file_path in file_paths:
            contents[file_path] = self.read_file(file_path)
            self.graph.add_node(file_path)

        # Pass 1: package index (primary type only)
        for file_path, content in contents.items():
            package_name = extract_package_name(content)
            type_name = extract_primary_type_name(content)
            if package_name and type_name:
                self.package_map[f"{package_name}.{type_name}"] = file_path

        # Pass 2: import edges
        unresolved = 0
        for file_path, content in contents.items():
            for import_string in extract_imports(content):
                target = self.resolve_import(import_string)
                if target is None:
                    unresolved += 1
                    continue
                self.graph.add_edge(file_path, target)

        self._built = True
        logger.info(
            "Dependency graph built: %d files, %d edges (%d imports unresolved)",
            self.graph.number_of_nodes(), self.graph.number_of_edges(), unresolved,
        )
        return self.graph

    def resolve_import(self, import_string: str) -> Optional[str]:
        """Resolve an import string to the file defining it.

        Exact match first, then prefix match (wildcard and package imports).
        When several indexed names share the prefix, the shortest name wins
        and equal lengths are ordered alphabetically, so the result does not
        depend on insertion order.

        Returns:
            Defining file path, or None if nothing matches
        """
        if not import_string:
            return None

        exact = self.package_map.get(import_string)
        if exact is not None:
            return exact

        candidates = [name for name in self.package_map if name.startswith(import_string)]
        if not candidates:
            logger.debug("Unresolved import: %s", import_string)
            return None

        best = min(candidates, key=lambda name: (len(name), name))
        return self.package_map[best]

    @property
    def forward(self) -> Dict[str, Set[str]]:
        """file -> files it imports."""
        return {node: set(self.graph.successors(node)) for node in self.graph.nodes}

    @property
    def reverse(self) -> Dict[str, Set[str]]:
        """file -> files importing it."""
        return {node: set(self.graph.predecessors(node)) for node in self.graph.nodes}

    def dependents_of(self, file_path: str) -> Set[str]:
        if file_path not in self.graph:
            return set()
        return set(self.graph.predecessors(file_path))

    def compute_transitive_impact(self, direct_files: Iterable[str]) -> Set[str]:
        """Find files that depend, directly or not, on the given files.

        Breadth-first over reverse edges, each file visited once. The direct
        files are removed only after the traversal, so the result holds
        strictly indirect impact even when cycles lead back to them.

        Args:
            direct_files: Files directly using shared symbols

        Returns:
            Transitively impacted files, excluding direct_files
        """
        direct = set(direct_files)
        visited: Set[str] = set()
        queue = deque(direct)

        while queue:
            file_path = queue.popleft()
            if file_path in visited:
                continue
            visited.add(file_path)

            for dependent in self.dependents_of(file_path):
                if dependent not in visited:
                    queue.append(dependent)

        return visited - direct

    def get_all_dependencies(self, file_path: str) -> Set[str]:
        """Every file reachable from file_path over forward edges."""
        if file_path not in self.graph:
            return set()
        reachable = nx.descendants(self.graph, file_path)
        reachable.discard(file_path)
        return reachable

    def get_stats(self) -> DependencyStats:
        out_degrees = [degree for _, degree in self.graph.out_degree()]
        in_degrees = [degree for _, degree in self.graph.in_degree()]
        return DependencyStats(
            total_files=self.graph.number_of_nodes(),
            total_edges=self.graph.number_of_edges(),
            max_dependencies=max(out_degrees, default=0),
            max_dependents=max(in_degrees, default=0),
        )
