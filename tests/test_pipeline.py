"""End-to-end analysis tests, in memory and on disk."""
import pytest

from kmp_impact.analyzer.pipeline import analyze_project, discover_files, run_analysis
from kmp_impact.analyzer.platforms import Platform
from kmp_impact.errors import ProjectNotFoundError


class TestRunAnalysisInMemory:
    CONTENTS = {
        "shared/src/commonMain/kotlin/Foo.kt": "package com.example\n\nclass Foo\nfun bar() {}\n",
        "app/src/main/Main.kt": "package com.example.app\n\nval f = Foo()\nfun main() {\n    bar()\n}\n",
    }

    def run(self):
        return run_analysis(
            ["shared/src/commonMain/kotlin/Foo.kt"],
            {Platform.ANDROID: ["app/src/main/Main.kt"]},
            read_file=self.CONTENTS.__getitem__,
        )

    def test_foo_bar_scenario(self):
        analysis = self.run()

        assert analysis.total_symbols == 2
        assert [o.file_path for o in analysis.symbol_usages["Foo"]] == ["app/src/main/Main.kt"]
        assert [o.file_path for o in analysis.symbol_usages["bar"]] == ["app/src/main/Main.kt"]
        assert analysis.affected_files == {"app/src/main/Main.kt"}
        assert analysis.transitive_files == set()

    def test_lines(self):
        analysis = self.run()

        assert analysis.total_app_lines == 5
        assert analysis.affected_lines == 5
        assert analysis.impact_ratio == 1.0

    def test_symbols_keep_module(self):
        analysis = self.run()
        assert {s.module for s in analysis.symbols} == {"shared"}

    def test_no_files(self):
        analysis = run_analysis([], {}, read_file=self.CONTENTS.__getitem__)

        assert analysis.total_symbols == 0
        assert analysis.impact_ratio == 0.0


class TestAnalyzeProject:
    def test_direct_and_transitive(self, kmp_project, project_files):
        analysis = analyze_project(kmp_project)

        assert analysis.total_symbols == 3
        assert analysis.affected_files == {project_files['MainActivity'], project_files['ContentView']}
        assert analysis.transitive_files == {project_files['Screen']}

    def test_line_figures(self, kmp_project):
        analysis = analyze_project(kmp_project)

        android = analysis.platform_impacts["Android"]
        ios = analysis.platform_impacts["iOS"]
        assert (android.total_lines, android.affected_lines) == (14, 10)
        assert (ios.total_lines, ios.affected_lines) == (5, 5)
        assert analysis.total_app_files == 4
        assert analysis.impact_ratio == pytest.approx(15 / 19)

    def test_top_symbols(self, kmp_project):
        analysis = analyze_project(kmp_project)

        assert analysis.platform_impacts["Android"].top_symbols == [("Greeting", 1), ("greet", 1)]
        assert analysis.ranked_symbols() == [("Greeting", 2, 2), ("greet", 1, 1)]

    def test_comment_mentions_are_ignored(self, kmp_project, project_files):
        analysis = analyze_project(kmp_project)

        lines = [o.line_number for o in analysis.symbol_usages["Greeting"]
                 if o.file_path == project_files['MainActivity']]
        assert lines == [7]

    def test_excluded_dirs_override(self, kmp_project):
        shared, app_files = discover_files(kmp_project, excluded_dirs={"iosApp"})

        assert len(shared) == 2
        assert Platform.IOS not in app_files

    def test_missing_project(self, tmp_path):
        with pytest.raises(ProjectNotFoundError):
            analyze_project(tmp_path / "does-not-exist")
