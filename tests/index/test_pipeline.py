"""Tests for the parse pipeline: retries, globals and offsets."""

from __future__ import annotations

import pytest

from hintscope.core.errors import ParseFailure
from hintscope.index import HintKind, ParsedFile, parse_text
from hintscope.index._internal.parsing import blank_line
from hintscope.index._internal.parsing.directives import parse_directive


def _snapshot(parsed: ParsedFile) -> list[tuple[int, int, list[str], list[str], list[str]]]:
    return [
        (
            scope.range.start,
            scope.range.end,
            sorted(d.name for d in scope.declarations),
            sorted(i.name for i in scope.identifier_occurrences),
            sorted(p.name for p in scope.property_occurrences),
        )
        for scope in parsed.tree.scopes()
    ]


class TestBlankLine:
    """Line blanking keeps every other offset stable."""

    def test_replaces_line_with_spaces(self) -> None:
        assert blank_line("ab\ncde\nf", 2) == "ab\n   \nf"

    def test_keeps_crlf(self) -> None:
        assert blank_line("ab\r\ncd\r\n", 1) == "  \r\ncd\r\n"

    def test_out_of_range_line_is_noop(self) -> None:
        assert blank_line("ab", 5) == "ab"

    def test_only_newline_ends_a_line(self) -> None:
        """Form feeds and line separators stay inside their line."""
        assert blank_line("a\fb\nc\n", 1) == "   \nc\n"
        assert blank_line("x\u2028y\nz", 2) == "x\u2028y\n "


class TestRetries:
    """Line-blanking recovery."""

    TEXT = "var a = 1;\n)))\nvar b = 2;\n"

    def test_routine_parse_does_not_retry(self) -> None:
        """Zero retries raise on the first syntax error, reporting its line."""
        with pytest.raises(ParseFailure) as exc_info:
            parse_text(self.TEXT, max_retries=0)

        assert exc_info.value.line == 2
        assert exc_info.value.details["attempts"] == 1

    def test_forced_parse_blanks_offending_line(self) -> None:
        parsed = parse_text(self.TEXT, max_retries=3)

        assert parsed.attempts == 2
        assert parsed.recovered
        assert [d.name for d in parsed.tree.root.declarations] == ["a", "b"]
        assert parsed.text_length == len(self.TEXT)
        assert parsed.tree.root.range.end == len(self.TEXT)

    @pytest.mark.parametrize(
        "prefix",
        ["// a\u2028b\n", "var x = 1;\fvar y = 2;\n"],
    )
    def test_recovery_counts_rows_like_the_parser(self, prefix: str) -> None:
        """Unicode and form-feed separators before the error do not shift the blanked line."""
        text = prefix + "var = ;\nvar ok = 1;\n"

        parsed = parse_text(text, max_retries=10)

        assert parsed.attempts == 2
        assert "ok" in [d.name for d in parsed.tree.root.declarations]

    def test_exhausted_retries_raise(self) -> None:
        text = ")))\n)))\n)))\nvar ok;\n"

        with pytest.raises(ParseFailure):
            parse_text(text, max_retries=2)

    def test_clean_parse_is_not_recovered(self) -> None:
        parsed = parse_text("var a;", max_retries=10)

        assert parsed.attempts == 1
        assert not parsed.recovered


class TestDerivedIndexes:
    """Identifier, property and association lists built from the tree."""

    def test_identifiers_collect_all_positions(self) -> None:
        text = "var n = 1;\nfunction f() { return n + n; }\n"
        parsed = parse_text(text)

        tokens = {t.value: t for t in parsed.identifiers}
        assert tokens["n"].kind is HintKind.IDENTIFIER
        assert len(tokens["n"].positions) == 3
        assert tokens["n"].positions[0] == text.index("n")

    def test_associations_are_counted(self) -> None:
        parsed = parse_text("x.foo(); x.foo = 1; function g() { x.foo; y.foo; }")

        assert parsed.associations[("x", "foo")] == 3
        assert parsed.associations[("y", "foo")] == 1
        assert [p.value for p in parsed.properties] == ["foo"]

    def test_reparse_is_idempotent(self) -> None:
        text = "function f(a) { var b = a.c; try { b(); } catch (e) { f(e); } }\nvar o = {k: 1};\n"

        assert _snapshot(parse_text(text)) == _snapshot(parse_text(text))

    def test_offsets_are_characters(self) -> None:
        """Non-ASCII text still yields character offsets."""
        text = 'var s = "üñí"; function g(p) { return p; }'
        parsed = parse_text(text)

        (g_scope,) = parsed.tree.root.children
        assert g_scope.range.start == text.index("function")
        assert g_scope.range.end == len(text)
        assert parsed.tree.root.range.end == len(text)
        declared = {d.name: d.position for d in g_scope.declarations}
        assert declared["p"] == text.index("p)")


class TestGlobals:
    """Lint-style global directives in leading comments."""

    def test_global_list_and_env_presets(self) -> None:
        text = "/*global define, $: true, legacy: false */\n/*jslint browser: true */\nvar x;\n"
        parsed = parse_text(text)

        assert "define" in parsed.globals
        assert "$" in parsed.globals
        assert "window" in parsed.globals
        assert "legacy" not in parsed.globals

    def test_directives_after_code_are_ignored(self) -> None:
        parsed = parse_text("var x;\n/*global late */\n")

        assert parsed.globals == []

    @pytest.mark.parametrize(
        ("comment", "expected"),
        [
            ("/*eslint-env node */", "require"),
            ("/*jshint devel: true */", "console"),
            ("/* globals jQuery */", "jQuery"),
        ],
    )
    def test_parse_directive(self, comment: str, expected: str) -> None:
        assert expected in parse_directive(comment)

    def test_disabled_preset_contributes_nothing(self) -> None:
        assert parse_directive("/*jslint browser: false */") == []

    def test_plain_comment_is_not_a_directive(self) -> None:
        assert parse_directive("/* just a note */") == []
