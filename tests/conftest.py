"""Shared fixtures: a small KMP monorepo laid out on disk."""
from pathlib import Path

import pytest

SHARED_GRADLE = 'plugins {\n    kotlin("multiplatform")\n}\n'
ANDROID_GRADLE = 'plugins {\n    id("com.android.application")\n}\n'

USER_KT = """package com.example.shared

data class User(val id: String)
"""

GREETING_KT = """package com.example.shared

class Greeting {
    fun greet(): String = "Hello"
}
"""

# 5 code lines; uses Greeting and greet directly
MAIN_ACTIVITY_KT = """package com.example.android

import com.example.shared.Greeting

class MainActivity {
    // Greeting is shared
    val text = Greeting().greet()
}
"""

# 5 code lines; only imports MainActivity
SCREEN_KT = """package com.example.android

import com.example.android.MainActivity

class Screen {
    val activity = MainActivity()
}
"""

# 4 code lines; unrelated to shared code
STANDALONE_KT = """package com.example.android

class Standalone {
    val x = 1
}
"""

# 5 code lines; uses Greeting directly
CONTENT_VIEW_SWIFT = """import SwiftUI
import shared

struct ContentView {
    let greeting = Greeting()
}
"""


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')
    return path


@pytest.fixture
def kmp_project(tmp_path):
    """Monorepo with a shared module, an Android app and an iOS app."""
    root = tmp_path.resolve() / "monorepo"

    write(root / "shared" / "build.gradle.kts", SHARED_GRADLE)
    shared_src = root / "shared" / "src" / "commonMain" / "kotlin" / "com" / "example" / "shared"
    write(shared_src / "User.kt", USER_KT)
    write(shared_src / "Greeting.kt", GREETING_KT)

    write(root / "androidApp" / "build.gradle.kts", ANDROID_GRADLE)
    write(root / "androidApp" / "src" / "main" / "AndroidManifest.xml", "<manifest />\n")
    android_src = root / "androidApp" / "src" / "main" / "java" / "com" / "example" / "android"
    write(android_src / "MainActivity.kt", MAIN_ACTIVITY_KT)
    write(android_src / "Screen.kt", SCREEN_KT)
    write(android_src / "Standalone.kt", STANDALONE_KT)

    (root / "iosApp" / "iosApp.xcodeproj").mkdir(parents=True)
    write(root / "iosApp" / "iosApp" / "ContentView.swift", CONTENT_VIEW_SWIFT)

    return root


@pytest.fixture
def project_files(kmp_project):
    """Absolute paths of the sample project's source files, by short name."""
    shared_src = kmp_project / "shared" / "src" / "commonMain" / "kotlin" / "com" / "example" / "shared"
    android_src = kmp_project / "androidApp" / "src" / "main" / "java" / "com" / "example" / "android"
    return {
        'User': str(shared_src / "User.kt"),
        'Greeting': str(shared_src / "Greeting.kt"),
        'MainActivity': str(android_src / "MainActivity.kt"),
        'Screen': str(android_src / "Screen.kt"),
        'Standalone': str(android_src / "Standalone.kt"),
        'ContentView': str(kmp_project / "iosApp" / "iosApp" / "ContentView.swift"),
    }


@pytest.fixture
def clean_env(monkeypatch):
    """Remove KMP_IMPACT_* variables for the test and restore them afterwards."""
    for name in ("KMP_IMPACT_FORMAT", "KMP_IMPACT_TOP_N",
                 "KMP_IMPACT_MAX_DEPTH", "KMP_IMPACT_EXCLUDED_DIRS"):
        # setenv first so undo also removes values loaded from a .env file
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch
