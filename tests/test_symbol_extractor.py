"""Tests for regex-based extraction of public shared symbols."""
import pytest

from kmp_impact.analyzer.models import SymbolKind
from kmp_impact.analyzer.symbol_extractor import (
    SymbolExtractor,
    determine_module_name,
    extract_shared_symbols,
)

SHARED_SOURCE = """package com.example.shared

data class User(val id: String, val name: String)
sealed class Result
expect class Platform()

interface UserRepository {
    suspend fun getUser(id: String): User
}

object UserCache

fun formatName(user: User): String = user.name
private fun hidden() {}

val defaultTimeout: Long = 30
typealias UserId = String
"""


@pytest.fixture
def extractor():
    return SymbolExtractor()


class TestDeclarations:
    """Each declaration keyword yields the matching kind."""

    def test_names_in_kind_order(self, extractor):
        symbols = extractor.extract(SHARED_SOURCE, "Shared.kt", "shared")

        assert [s.name for s in symbols] == [
            'User', 'Result', 'Platform',
            'UserRepository',
            'UserCache',
            'getUser', 'formatName',
            'defaultTimeout',
            'UserId',
        ]

    def test_kinds(self, extractor):
        kinds = {s.name: s.kind for s in extractor.extract(SHARED_SOURCE, "Shared.kt", "shared")}

        assert kinds['User'] == SymbolKind.CLASS
        assert kinds['UserRepository'] == SymbolKind.INTERFACE
        assert kinds['UserCache'] == SymbolKind.SINGLETON
        assert kinds['getUser'] == SymbolKind.FUNCTION
        assert kinds['defaultTimeout'] == SymbolKind.PROPERTY
        assert kinds['UserId'] == SymbolKind.TYPE_ALIAS

    def test_private_declarations_ignored(self, extractor):
        names = {s.name for s in extractor.extract(SHARED_SOURCE, "Shared.kt", "shared")}
        assert 'hidden' not in names

    def test_lowercase_type_names_ignored(self, extractor):
        assert extractor.extract("class lowercase\nfun Upper() {}\n", "A.kt", "shared") == []

    def test_symbols_carry_location(self, extractor):
        symbol = extractor.extract("class Foo\n", "shared/src/Foo.kt", "shared")[0]

        assert symbol.file_path == "shared/src/Foo.kt"
        assert symbol.module == "shared"
        assert symbol.is_public
        assert symbol.key == ("Foo", "shared/src/Foo.kt")

    def test_extraction_is_idempotent(self, extractor):
        first = extractor.extract(SHARED_SOURCE, "Shared.kt", "shared")
        second = extractor.extract(SHARED_SOURCE, "Shared.kt", "shared")
        assert first == second


class TestPrivacyHeuristic:
    """Files marked internal/private are skipped as a whole."""

    def test_internal_anywhere_skips_file(self, extractor):
        content = "class Visible\ninternal class Helper\n"
        assert extractor.extract(content, "A.kt", "shared") == []

    def test_leading_private_skips_file(self, extractor):
        content = "private class Hidden\nclass Visible\n"
        assert extractor.extract(content, "A.kt", "shared") == []

    def test_private_later_in_file_does_not_skip(self, extractor):
        content = "class Visible\nprivate class Hidden\n"
        assert [s.name for s in extractor.extract(content, "A.kt", "shared")] == ['Visible']


class TestModuleName:
    def test_directory_before_src(self):
        assert determine_module_name("/repo/shared/src/commonMain/kotlin/A.kt") == "shared"

    def test_windows_separators(self):
        assert determine_module_name("C:\\repo\\core\\src\\main\\A.kt") == "core"

    def test_no_src_directory(self):
        assert determine_module_name("A.kt") == "unknown"


class TestExtractSharedSymbols:
    def test_reads_every_file(self):
        contents = {
            "shared/src/A.kt": "class Alpha\n",
            "shared/src/B.kt": "fun beta() {}\n",
        }
        symbols = extract_shared_symbols(list(contents), read_file=contents.__getitem__)

        assert [(s.name, s.module) for s in symbols] == [('Alpha', 'shared'), ('beta', 'shared')]

    def test_unreadable_file_aborts(self, tmp_path):
        existing = tmp_path / "A.kt"
        existing.write_text("class Alpha\n", encoding='utf-8')

        with pytest.raises(OSError):
            extract_shared_symbols([str(existing), str(tmp_path / "missing.kt")])

    def test_extract_symbols_reads_from_disk(self, tmp_path, extractor):
        path = tmp_path / "Foo.kt"
        path.write_text("object Foo\n", encoding='utf-8')

        symbols = extractor.extract_symbols(path, "shared")

        assert [(s.name, s.kind) for s in symbols] == [('Foo', SymbolKind.SINGLETON)]
