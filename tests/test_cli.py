"""CLI tests through typer's CliRunner."""
import json

import pytest
from typer.testing import CliRunner

from kmp_impact import config as config_module
from kmp_impact.config import __version__
from kmp_impact.main import app
from conftest import write

runner = CliRunner()


@pytest.fixture(autouse=True)
def fresh_config(clean_env):
    config_module.reset_config()
    yield
    config_module.reset_config()


class TestAnalyze:
    def test_json_report_to_file(self, kmp_project, tmp_path):
        target = tmp_path / "report.json"
        result = runner.invoke(app, ["analyze", str(kmp_project), "--format", "json", "--output", str(target)])

        assert result.exit_code == 0, result.output
        data = json.loads(target.read_text(encoding='utf-8'))
        assert data['total_app_lines'] == 19
        assert data['affected_lines'] == 15
        assert sorted(data['platform_impacts']) == ["Android", "iOS"]

    def test_table_report(self, kmp_project):
        result = runner.invoke(app, ["analyze", str(kmp_project)])

        assert result.exit_code == 0, result.output
        assert "Impact Coverage: 78.95%" in result.output

    def test_markdown_to_file(self, kmp_project, tmp_path):
        target = tmp_path / "report.md"
        result = runner.invoke(app, ["analyze", str(kmp_project), "-f", "md", "-o", str(target)])

        assert result.exit_code == 0, result.output
        assert "| Android | 71.43% |" in target.read_text(encoding='utf-8')

    def test_top_option(self, kmp_project, tmp_path):
        target = tmp_path / "report.json"
        result = runner.invoke(app, ["analyze", str(kmp_project), "-f", "json", "-o", str(target), "--top", "1"])

        assert result.exit_code == 0, result.output
        data = json.loads(target.read_text(encoding='utf-8'))
        assert data['platform_impacts']['Android']['top_symbols'] == [["Greeting", 1]]

    def test_format_from_environment(self, kmp_project, tmp_path, clean_env):
        clean_env.setenv("KMP_IMPACT_FORMAT", "json")
        target = tmp_path / "report.out"

        result = runner.invoke(app, ["analyze", str(kmp_project), "-o", str(target)])

        assert result.exit_code == 0, result.output
        assert json.loads(target.read_text(encoding='utf-8'))['total_symbols'] == 3

    def test_json_stdout_without_shared_module(self, tmp_path):
        """The no-shared-code warning goes to stderr, leaving stdout as pure JSON."""
        write(tmp_path / "app" / "src" / "Main.kt", "package app\n\nclass Main\n")

        result = runner.invoke(app, ["analyze", str(tmp_path), "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data['total_symbols'] == 0
        assert "No shared KMP source files" not in result.stdout
        assert "No shared KMP source files" in result.output

    def test_missing_path(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "nope")])

        assert result.exit_code == 1
        assert "Project path does not exist" in result.output

    def test_unsupported_format(self, kmp_project):
        result = runner.invoke(app, ["analyze", str(kmp_project), "--format", "xml"])

        assert result.exit_code == 1
        assert "Unsupported output format" in result.output


class TestOtherCommands:
    def test_symbols(self, kmp_project):
        result = runner.invoke(app, ["symbols", str(kmp_project)])

        assert result.exit_code == 0, result.output
        assert "Greeting" in result.output
        assert "Total symbols: 3" in result.output

    def test_graph(self, kmp_project):
        result = runner.invoke(app, ["graph", str(kmp_project)])

        assert result.exit_code == 0, result.output
        assert "Import Edges" in result.output

    def test_symbols_missing_path(self, tmp_path):
        result = runner.invoke(app, ["symbols", str(tmp_path / "nope")])
        assert result.exit_code == 1

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output
