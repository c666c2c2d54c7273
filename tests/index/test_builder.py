"""Tests for building scope trees from JavaScript syntax trees."""

from __future__ import annotations

from collections.abc import Callable
from types import SimpleNamespace

import pytest

from hintscope.core.errors import MalformedNodeError
from hintscope.index import ParsedFile, Scope, ScopeKind
from hintscope.index._internal.parsing.builder import build_scope_tree
from hintscope.index._internal.parsing.treesitter import OffsetMap, ParseResult

Parse = Callable[[str], ParsedFile]


def scope_at(parsed: ParsedFile, text: str, marker: str) -> Scope:
    """Innermost scope at the first occurrence of ``marker``."""
    scope = parsed.tree.root.find_innermost_scope(text.index(marker))
    assert scope is not None
    return scope


def names(items: tuple[object, ...] | list[object]) -> list[str]:
    return [item.name for item in items]  # type: ignore[attr-defined]


class TestFunctionScopes:
    """Functions and catch clauses open scopes; blocks do not."""

    def test_cursor_inside_function_body(self, parse: Parse) -> None:
        """Parameters and locals are depth 0, the function name depth 1."""
        text = "function f(x) { var y = x + g(); return y; }\nfunction h(z) { var w = 1; }\n"
        parsed = parse(text)

        inner = scope_at(parsed, text, "return")

        assert names(inner.declarations) == ["x", "y"]
        assert inner.scope_depth_of("x") == 0
        assert inner.scope_depth_of("y") == 0
        assert inner.scope_depth_of("f") == 1
        assert inner.scope_depth_of("g") is None
        assert inner.scope_depth_of("z") is None
        assert inner.scope_depth_of("w") is None

    def test_declaration_name_in_enclosing_scope(self, parse: Parse) -> None:
        parsed = parse("function outer(a) { function nested(b) {} }")
        root = parsed.tree.root

        assert names(root.declarations) == ["outer"]
        (outer,) = root.children
        assert names(outer.declarations) == ["a", "nested"]
        (nested,) = outer.children
        assert names(nested.declarations) == ["b"]

    def test_named_function_expression_visible_only_inside(self, parse: Parse) -> None:
        text = "var g = function inner(a) { return a; };"
        parsed = parse(text)
        root = parsed.tree.root

        assert names(root.declarations) == ["g"]
        assert root.scope_depth_of("inner") is None
        assert scope_at(parsed, text, "return").scope_depth_of("inner") == 0

    def test_arrow_function_parameters(self, parse: Parse) -> None:
        text = "const k = (p, {q, r: s}, [t = 1], ...rest) => p;\nconst u = v => v;"
        parsed = parse(text)
        first, second = parsed.tree.root.children

        assert sorted(names(first.declarations)) == ["p", "q", "rest", "s", "t"]
        assert names(second.declarations) == ["v"]
        assert names(parsed.tree.root.declarations) == ["k", "u"]

    def test_catch_clause_scope(self, parse: Parse) -> None:
        text = "try { risky(); } catch (err) { report(err); }"
        parsed = parse(text)

        catch = scope_at(parsed, text, "report")

        assert catch.kind is ScopeKind.CATCH
        assert names(catch.declarations) == ["err"]
        assert parsed.tree.root.scope_depth_of("err") is None

    def test_blocks_do_not_open_scopes(self, parse: Parse) -> None:
        parsed = parse("if (ok) { var a = 1; } for (let i = 0; i < 3; i++) { const b = i; }")
        root = parsed.tree.root

        assert root.children == []
        assert sorted(names(root.declarations)) == ["a", "b", "i"]

    def test_method_definition(self, parse: Parse) -> None:
        text = "class Widget { render(props) { return this.label; } }"
        parsed = parse(text)
        root = parsed.tree.root

        assert names(root.declarations) == ["Widget"]
        assert "render" in names(root.property_occurrences)
        method = scope_at(parsed, text, "return")
        assert names(method.declarations) == ["props"]
        assert "label" in names(method.property_occurrences)

    def test_root_covers_whole_text(self, parse: Parse) -> None:
        text = "var a = 1;\n\n\n"
        parsed = parse(text)

        assert parsed.tree.root.range.start == 0
        assert parsed.tree.root.range.end == len(text)


class TestDeclarations:
    """Variable, import and loop declarations."""

    def test_imports_declare_local_names(self, parse: Parse) -> None:
        parsed = parse('import d, { e as f2, g } from "mod";\nimport * as ns from "other";\n')

        assert names(parsed.tree.root.declarations) == ["d", "f2", "g", "ns"]

    def test_for_in_with_var_declares(self, parse: Parse) -> None:
        parsed = parse("for (var k in obj) {} for (j in obj) {}")
        root = parsed.tree.root

        assert names(root.declarations) == ["k"]
        assert "j" in names(root.identifier_occurrences)

    def test_destructuring_declarations(self, parse: Parse) -> None:
        parsed = parse("var {a, b: c, ...d} = src; let [e, , f = 2] = arr;")

        assert sorted(names(parsed.tree.root.declarations)) == ["a", "c", "d", "e", "f"]

    def test_declaration_sites_are_occurrences(self, parse: Parse) -> None:
        text = "var alpha = 1; alpha = alpha + 1;"
        parsed = parse(text)

        positions = [i.position for i in parsed.tree.root.identifier_occurrences if i.name == "alpha"]
        assert len(positions) == 3
        assert positions[0] == text.index("alpha")


class TestProperties:
    """Member accesses, object keys and associations."""

    def test_chained_member_records_first_link_only(self, parse: Parse) -> None:
        """a.b.c records (a, b); c's object is a member expression."""
        parsed = parse("a.b.c = 1;")
        root = parsed.tree.root

        assert sorted(names(root.property_occurrences)) == ["b", "c"]
        assert list(root.associations) == [("a", "b")]
        assert names(root.identifier_occurrences) == ["a"]

    def test_computed_member_is_not_a_property(self, parse: Parse) -> None:
        parsed = parse("obj[key] = obj.known;")
        root = parsed.tree.root

        assert names(root.property_occurrences) == ["known"]
        assert list(root.associations) == [("obj", "known")]
        assert "key" in names(root.identifier_occurrences)

    def test_object_literal_keys(self, parse: Parse) -> None:
        parsed = parse("var beta = 2; var o = {alpha: 1, beta};")
        root = parsed.tree.root

        assert sorted(names(root.property_occurrences)) == ["alpha", "beta"]

    def test_property_in_nested_scope(self, parse: Parse) -> None:
        text = "function f() { return $.ajax; }"
        parsed = parse(text)
        inner = scope_at(parsed, text, "return")

        assert list(inner.associations) == [("$", "ajax")]
        assert list(parsed.tree.root.associations) == []


class TestRobustness:
    """Input shapes the builder must survive."""

    def test_deep_nesting_does_not_recurse(self, parse: Parse) -> None:
        depth = 3000
        parsed = parse("var deep = " + "[" * depth + "]" * depth + ";")

        assert names(parsed.tree.root.declarations) == ["deep"]

    def test_jsx_and_templates(self, parse: Parse) -> None:
        text = "const el = <div title={label}>{`hi ${who}`}</div>;"
        parsed = parse(text)
        occurrences = names(parsed.tree.root.identifier_occurrences)

        assert "label" in occurrences
        assert "who" in occurrences

    def test_unknown_node_kind_fails_fast(self) -> None:
        """A named node the dispatch table does not know raises MalformedNodeError."""
        mystery = SimpleNamespace(
            type="mystery_node",
            is_named=True,
            named_children=[],
            children=[],
            start_byte=0,
            end_byte=2,
        )
        root = SimpleNamespace(type="program", is_named=True, named_children=[mystery], children=[mystery])
        result = ParseResult(
            tree=None,
            root_node=root,
            source=b"??",
            offsets=OffsetMap("??"),
            text_length=2,
            first_error=None,
        )

        with pytest.raises(MalformedNodeError) as exc_info:
            build_scope_tree(result)

        assert exc_info.value.details == {"kind": "mystery_node", "offset": 0}
