"""Detect KMP, Android and iOS projects from directory layout and build files."""
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Set

from .platforms import Platform
from ..utils.file_utils import EXCLUDED_DIRS, contains_source_files, find_source_files

logger = logging.getLogger(__name__)


class ProjectType(str, Enum):
    KOTLIN_MULTIPLATFORM = "KotlinMultiplatform"
    ANDROID = "Android"
    IOS = "iOS"


SOURCE_EXTENSIONS = {
    ProjectType.KOTLIN_MULTIPLATFORM: ('kt', 'kts'),
    ProjectType.ANDROID: Platform.ANDROID.extensions,
    ProjectType.IOS: Platform.IOS.extensions,
}

PLATFORM_BY_PROJECT_TYPE = {
    ProjectType.ANDROID: Platform.ANDROID,
    ProjectType.IOS: Platform.IOS,
}


@dataclass
class DetectedProject:
    project_type: ProjectType
    root_path: Path
    source_dirs: List[Path] = field(default_factory=list)


class ProjectDetector:
    """Find shared and platform source files in a monorepo."""

    GRADLE_FILES = {'build.gradle', 'build.gradle.kts'}

    MULTIPLATFORM_MARKERS = (
        'kotlin("multiplatform")',
        'kotlin-multiplatform',
        'org.jetbrains.kotlin.multiplatform',
    )
    KMP_CONFIG_MARKERS = ('commonMain', 'androidMain', 'iosMain', 'sourceSets')
    ANDROID_MARKERS = ('com.android.application', 'com.android.library', 'android {')

    KMP_SOURCE_SETS = (
        'commonMain/kotlin', 'commonMain',
        'androidMain/kotlin', 'androidMain',
        'iosMain/kotlin', 'iosMain',
        'src/commonMain/kotlin', 'src/commonMain',
        'src/androidMain/kotlin', 'src/androidMain',
        'src/iosMain/kotlin', 'src/iosMain',
    )
    ANDROID_SOURCE_DIRS = (
        'src/main/java', 'src/main/kotlin', 'src/main',
        'app/src/main/java', 'app/src/main/kotlin', 'app/src/main',
        'android/src/main/java', 'android/src/main/kotlin',
        'androidApp/src/main/java', 'androidApp/src/main/kotlin',
    )
    IOS_DIR_NAMES = ('iosApp', 'iOS', 'ios')

    # Legacy layout used when nothing is detected
    LEGACY_SHARED_DIRS = ('commonMain', 'androidMain', 'iosMain', 'shared/src', 'shared')

    def __init__(self, project_root: str | Path = ".", max_depth: int = 5,
                 excluded_dirs: Set[str] = None):
        """Initialize project detector.

        Args:
            project_root: Root directory of the monorepo
            max_depth: How deep to look for build files and manifests
            excluded_dirs: Directory names never descended into
        """
        self.project_root = Path(project_root).resolve()
        self.max_depth = max_depth
        self.excluded_dirs = set(EXCLUDED_DIRS if excluded_dirs is None else excluded_dirs)

    # ------------------------------------------------------------------
    # Walking helpers
    # ------------------------------------------------------------------

    def _walk(self, root: Path, max_depth: int) -> Iterator[Path]:
        """Yield files and directories under root up to max_depth levels."""
        root_depth = len(root.parts)
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            depth = len(current.parts) - root_depth
            dirnames[:] = sorted(d for d in dirnames if d not in self.excluded_dirs)
            if depth >= max_depth:
                # Xcode bundles are directories, report them before pruning
                for d in dirnames:
                    yield current / d
                dirnames[:] = []
            else:
                for d in dirnames:
                    yield current / d
            for name in sorted(filenames):
                yield current / name

    @staticmethod
    def _read_text(path: Path) -> str:
        try:
            return path.read_text(encoding='utf-8', errors='replace')
        except OSError as exc:
            logger.debug("Cannot read %s: %s", path, exc)
            return ''

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def detect_all_projects(self) -> List[DetectedProject]:
        projects = []
        projects.extend(self.find_kmp_projects())
        projects.extend(self.find_android_projects())
        projects.extend(self.find_ios_projects())
        return projects

    def is_kmp_gradle_file(self, path: Path) -> bool:
        content = self._read_text(path)
        return (any(marker in content for marker in self.MULTIPLATFORM_MARKERS)
                or any(marker in content for marker in self.KMP_CONFIG_MARKERS))

    def is_android_gradle_file(self, path: Path) -> bool:
        content = self._read_text(path)
        return any(marker in content for marker in self.ANDROID_MARKERS)

    def find_kmp_source_dirs(self, project_dir: Path) -> List[Path]:
        source_dirs = [
            project_dir / source_set
            for source_set in self.KMP_SOURCE_SETS
            if (project_dir / source_set).is_dir()
        ]

        shared_src = project_dir / 'shared' / 'src'
        if shared_src.is_dir():
            for path in self._walk(shared_src, 3):
                if path.is_dir() and path.name in ('commonMain', 'kotlin'):
                    source_dirs.append(path)

        return source_dirs

    def find_kmp_projects(self) -> List[DetectedProject]:
        projects = []
        for path in self._walk(self.project_root, self.max_depth):
            if path.name in self.GRADLE_FILES and self.is_kmp_gradle_file(path):
                source_dirs = self.find_kmp_source_dirs(path.parent)
                if source_dirs:
                    projects.append(DetectedProject(ProjectType.KOTLIN_MULTIPLATFORM, path.parent, source_dirs))

        if not projects:
            # Structure fallback: a `shared` module with a commonMain source set
            for path in self._walk(self.project_root, 3):
                if path.is_dir() and path.name == 'shared' and (path / 'src' / 'commonMain').is_dir():
                    source_dirs = self.find_kmp_source_dirs(path)
                    if source_dirs:
                        projects.append(DetectedProject(ProjectType.KOTLIN_MULTIPLATFORM, path, source_dirs))

        return projects

    def find_android_source_dirs(self, project_dir: Path) -> List[Path]:
        extensions = SOURCE_EXTENSIONS[ProjectType.ANDROID]
        return [
            project_dir / pattern
            for pattern in self.ANDROID_SOURCE_DIRS
            if (project_dir / pattern).is_dir() and contains_source_files(project_dir / pattern, extensions)
        ]

    def _android_module_root(self, manifest: Path) -> Path:
        """Nearest ancestor (up to 3 levels) holding a gradle build file."""
        candidate = manifest.parent
        for _ in range(3):
            parent = candidate.parent
            if any((parent / name).exists() for name in self.GRADLE_FILES):
                return parent
            candidate = parent
        return candidate

    def find_android_projects(self) -> List[DetectedProject]:
        projects = []
        for path in self._walk(self.project_root, self.max_depth):
            if path.name == 'AndroidManifest.xml':
                module_root = self._android_module_root(path)
                source_dirs = self.find_android_source_dirs(module_root)
                if source_dirs:
                    projects.append(DetectedProject(ProjectType.ANDROID, module_root, source_dirs))

        if not projects:
            for path in self._walk(self.project_root, self.max_depth):
                if path.name in self.GRADLE_FILES and self.is_android_gradle_file(path):
                    source_dirs = self.find_android_source_dirs(path.parent)
                    if source_dirs:
                        projects.append(DetectedProject(ProjectType.ANDROID, path.parent, source_dirs))

        return projects

    def find_ios_source_dirs(self, project_dir: Path) -> List[Path]:
        extensions = ('swift', 'm', 'mm')
        source_dirs = []
        for dir_name in self.IOS_DIR_NAMES:
            ios_path = project_dir / dir_name
            if dir_name in self.excluded_dirs or not ios_path.is_dir():
                continue
            if contains_source_files(ios_path, extensions):
                source_dirs.append(ios_path)
            nested = ios_path / dir_name
            if nested.is_dir() and contains_source_files(nested, extensions):
                source_dirs.append(nested)

        if not source_dirs:
            for path in self._walk(project_dir, 3):
                if path.is_dir() and contains_source_files(path, extensions):
                    source_dirs.append(path)

        return source_dirs

    def find_ios_projects(self) -> List[DetectedProject]:
        projects = []
        for path in self._walk(self.project_root, 4):
            if path.suffix in ('.xcodeproj', '.xcworkspace'):
                source_dirs = self.find_ios_source_dirs(path.parent)
                if source_dirs:
                    projects.append(DetectedProject(ProjectType.IOS, path.parent, source_dirs))

        if not projects:
            for indicator in self.IOS_DIR_NAMES:
                ios_path = self.project_root / indicator
                if indicator not in self.excluded_dirs and ios_path.is_dir():
                    source_dirs = self.find_ios_source_dirs(ios_path)
                    if source_dirs:
                        projects.append(DetectedProject(ProjectType.IOS, ios_path, source_dirs))

        return projects

    # ------------------------------------------------------------------
    # File lists
    # ------------------------------------------------------------------

    def get_all_source_files(self, project: DetectedProject) -> List[Path]:
        extensions = SOURCE_EXTENSIONS[project.project_type]
        files = set()
        for source_dir in project.source_dirs:
            files.update(find_source_files(source_dir, extensions, self.excluded_dirs))
        return sorted(files)

    def find_shared_files(self, projects: List[DetectedProject] = None) -> List[str]:
        """Kotlin files of every detected KMP module."""
        if projects is None:
            projects = self.detect_all_projects()

        kmp_projects = [p for p in projects if p.project_type == ProjectType.KOTLIN_MULTIPLATFORM]
        logger.info("Found %d KMP project(s)", len(kmp_projects))

        files = set()
        for project in kmp_projects:
            logger.debug("KMP project root: %s (%d source dirs)", project.root_path, len(project.source_dirs))
            files.update(self.get_all_source_files(project))

        if not files:
            logger.info("No KMP projects auto-detected, falling back to directory patterns")
            for pattern in self.LEGACY_SHARED_DIRS:
                files.update(find_source_files(self.project_root / pattern, ('kt', 'kts'), self.excluded_dirs))

        logger.info("Total KMP source files: %d", len(files))
        return sorted(str(f) for f in files)

    def find_app_files(self, projects: List[DetectedProject] = None,
                       shared_files: List[str] = None) -> Dict[Platform, List[str]]:
        """App files grouped by platform.

        Files that also belong to the shared module are left out, so
        androidMain/iosMain sources nested in an app directory are not
        counted twice.
        """
        if projects is None:
            projects = self.detect_all_projects()
        shared = set(shared_files or [])

        result: Dict[Platform, List[str]] = {}
        for project_type, platform in PLATFORM_BY_PROJECT_TYPE.items():
            matching = [p for p in projects if p.project_type == project_type]
            if not matching:
                continue
            files = set()
            for project in matching:
                logger.debug("%s project root: %s", platform.display_name, project.root_path)
                files.update(str(f) for f in self.get_all_source_files(project))
            files -= shared
            if files:
                logger.info("Found %d %s project(s), %d files", len(matching), platform.display_name, len(files))
                result[platform] = sorted(files)

        if not result:
            logger.info("No platform projects auto-detected, falling back to directory patterns")
            for platform in Platform:
                files = set()
                for pattern in platform.app_directory_patterns:
                    found = find_source_files(self.project_root / pattern, platform.extensions, self.excluded_dirs)
                    files.update(str(f) for f in found)
                files -= shared
                if files:
                    result[platform] = sorted(files)

        return result
