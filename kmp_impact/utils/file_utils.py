"""File system helpers: reading sources and discovering files."""
from pathlib import Path
from typing import Iterable, List, Set

# Build outputs, dependency caches and VCS metadata never hold app code
EXCLUDED_DIRS = {
    'build', '.gradle', '.idea', '.git', '.kotlin',
    'Pods', 'Carthage', 'DerivedData', 'xcuserdata',
    'node_modules', '.venv', 'venv', '__pycache__',
}


def read_source(file_path: str | Path) -> str:
    """Read a source file as text.

    Undecodable bytes are replaced rather than failing the read.

    Raises:
        OSError: If the file is missing or unreadable
    """
    with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
        return f.read()


def is_excluded(path: Path, excluded_dirs: Set[str] = None) -> bool:
    excluded = EXCLUDED_DIRS if excluded_dirs is None else excluded_dirs
    return any(part in excluded for part in path.parts)


def find_source_files(root: str | Path, extensions: Iterable[str],
                      excluded_dirs: Set[str] = None) -> List[Path]:
    """Find files under root whose extension is in extensions.

    Args:
        root: Directory to walk
        extensions: Extensions without the leading dot (e.g. ['kt', 'java'])
        excluded_dirs: Directory names to skip (defaults to EXCLUDED_DIRS)

    Returns:
        Sorted list of matching files
    """
    root = Path(root)
    if not root.is_dir():
        return []

    wanted = {f".{ext.lstrip('.')}" for ext in extensions}
    files = set()
    for path in root.rglob('*'):
        if path.suffix in wanted and path.is_file():
            relative = path.relative_to(root)
            if not is_excluded(relative, excluded_dirs):
                files.add(path)

    return sorted(files)


def contains_source_files(directory: str | Path, extensions: Iterable[str]) -> bool:
    """Check if a directory holds at least one file with a given extension."""
    wanted = {f".{ext.lstrip('.')}" for ext in extensions}
    directory = Path(directory)
    if not directory.is_dir():
        return False
    return any(path.suffix in wanted for path in directory.rglob('*'))
