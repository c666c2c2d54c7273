"""Scope tree construction from a tree-sitter JavaScript syntax tree.

The walk is iterative: a work stack holds ``(action, node, scope)`` items so
deeply nested sources cannot exhaust the interpreter's recursion limit.
Dispatch on node kind is a closed table; a named node of a kind the table
does not know aborts the build with ``MalformedNodeError``.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

import structlog

from hintscope.core.errors import MalformedNodeError
from hintscope.index.models import Identifier, PropertyToken, TextRange
from hintscope.index.scope import ScopeKind, ScopeTree
from hintscope.index._internal.parsing.treesitter import ParseResult

logger = structlog.get_logger()


class _Action(Enum):
    VISIT = "visit"
    DECLARE = "declare"


# Named nodes that carry no identifiers or scopes.
LEAF_KINDS = frozenset(
    {
        "comment",
        "hash_bang_line",
        "html_comment",
        "string",
        "string_fragment",
        "escape_sequence",
        "number",
        "regex",
        "regex_pattern",
        "regex_flags",
        "this",
        "super",
        "true",
        "false",
        "null",
        "undefined",
        "statement_identifier",
        "meta_property",
        "import",
        "optional_chain",
        "empty_statement",
        "debugger_statement",
        "jsx_text",
        "html_character_reference",
        "private_property_identifier",
        "glimmer_template",
        "glimmer_opening_tag",
        "glimmer_closing_tag",
    }
)

# Named nodes whose named children are visited in the current scope.
PASSTHROUGH_KINDS = frozenset(
    {
        "program",
        # statements
        "expression_statement",
        "statement_block",
        "lexical_declaration",
        "variable_declaration",
        "using_declaration",
        "if_statement",
        "else_clause",
        "switch_statement",
        "switch_body",
        "switch_case",
        "switch_default",
        "for_statement",
        "while_statement",
        "do_statement",
        "try_statement",
        "finally_clause",
        "with_statement",
        "return_statement",
        "throw_statement",
        "break_statement",
        "continue_statement",
        "labeled_statement",
        "parenthesized_expression",
        # expressions
        "assignment_expression",
        "augmented_assignment_expression",
        "binary_expression",
        "unary_expression",
        "update_expression",
        "ternary_expression",
        "sequence_expression",
        "call_expression",
        "new_expression",
        "await_expression",
        "yield_expression",
        "subscript_expression",
        "spread_element",
        "template_string",
        "template_substitution",
        "tagged_template",
        "arguments",
        "object",
        "array",
        "pair",
        "computed_property_name",
        # destructuring used as an assignment target
        "object_pattern",
        "array_pattern",
        "pair_pattern",
        "assignment_pattern",
        "object_assignment_pattern",
        "rest_pattern",
        # classes
        "class",
        "class_expression",
        "class_body",
        "class_heritage",
        "field_definition",
        "class_static_block",
        "decorator",
        # modules
        "export_statement",
        "export_clause",
        "export_specifier",
        "namespace_export",
        "import_attribute",
        # jsx
        "jsx_element",
        "jsx_self_closing_element",
        "jsx_opening_element",
        "jsx_closing_element",
        "jsx_attribute",
        "jsx_expression",
        "jsx_namespace_name",
        "jsx_member_expression",
        "nested_identifier",
    }
)


class ScopeBuilder:
    """Builds a frozen ``ScopeTree`` from a successful ``ParseResult``.

    Scopes open at function bodies (declarations, expressions, arrows,
    methods, generators) and catch clauses. A function declaration's name is
    bound in the enclosing scope; a named function expression's name is
    bound inside its own scope. Parameters bind in the function's scope.
    """

    def __init__(self, result: ParseResult) -> None:
        self._result = result
        self._tree = ScopeTree(TextRange(0, result.text_length))
        self._stack: list[tuple[_Action, Any, int]] = []
        self._visitors: dict[str, Callable[[Any, int], None]] = {
            "identifier": self._visit_identifier,
            "shorthand_property_identifier": self._visit_shorthand_property,
            "shorthand_property_identifier_pattern": self._visit_identifier,
            "property_identifier": self._visit_property_identifier,
            "member_expression": self._visit_member_expression,
            "function_declaration": self._visit_function_declaration,
            "generator_function_declaration": self._visit_function_declaration,
            "function_expression": self._visit_function_expression,
            "function": self._visit_function_expression,
            "generator_function": self._visit_function_expression,
            "arrow_function": self._visit_arrow_function,
            "method_definition": self._visit_method_definition,
            "catch_clause": self._visit_catch_clause,
            "variable_declarator": self._visit_variable_declarator,
            "class_declaration": self._visit_class_declaration,
            "import_statement": self._visit_import_statement,
            "for_in_statement": self._visit_for_in_statement,
        }

    def build(self) -> ScopeTree:
        self._push_children(_Action.VISIT, self._result.root_node, 0)
        while self._stack:
            action, node, scope = self._stack.pop()
            if action is _Action.DECLARE:
                self._declare_pattern(node, scope)
            else:
                self._visit(node, scope)
        logger.debug("scope_tree_built", scopes=len(self._tree))
        return self._tree.freeze()

    # ------------------------------------------------------------------
    # Stack helpers
    # ------------------------------------------------------------------

    def _push(self, action: _Action, node: Any, scope: int) -> None:
        if node is not None:
            self._stack.append((action, node, scope))

    def _push_all(self, action: _Action, nodes: list[Any], scope: int) -> None:
        # Reversed so nodes are processed in source order
        for node in reversed(nodes):
            self._push(action, node, scope)

    def _push_children(self, action: _Action, node: Any, scope: int) -> None:
        self._push_all(action, node.named_children, scope)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def _name(self, node: Any) -> tuple[str, int]:
        return self._result.node_text(node), self._result.start_offset(node)

    def _range(self, node: Any) -> TextRange:
        return TextRange(self._result.start_offset(node), self._result.end_offset(node))

    def _occurrence(self, node: Any, scope: int) -> None:
        name, pos = self._name(node)
        self._tree.add_identifier_occurrence(scope, Identifier(name, pos))

    def _declaration(self, node: Any, scope: int) -> None:
        name, pos = self._name(node)
        self._tree.declare(scope, Identifier(name, pos))
        self._tree.add_identifier_occurrence(scope, Identifier(name, pos))

    def _property(self, node: Any, scope: int) -> None:
        name, pos = self._name(node)
        self._tree.add_property_occurrence(scope, PropertyToken(name, pos))

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _visit(self, node: Any, scope: int) -> None:
        if not node.is_named:
            return
        kind = node.type
        visitor = self._visitors.get(kind)
        if visitor is not None:
            visitor(node, scope)
        elif kind in PASSTHROUGH_KINDS:
            self._push_children(_Action.VISIT, node, scope)
        elif kind not in LEAF_KINDS:
            raise MalformedNodeError.unknown_kind(kind, self._result.start_offset(node))

    def _declare_pattern(self, node: Any, scope: int) -> None:
        """Bind every name introduced by a binding pattern."""
        kind = node.type
        if kind in ("identifier", "shorthand_property_identifier_pattern"):
            self._declaration(node, scope)
        elif kind in ("assignment_pattern", "object_assignment_pattern"):
            self._push(_Action.VISIT, node.child_by_field_name("right"), scope)
            self._push(_Action.DECLARE, node.child_by_field_name("left"), scope)
        elif kind == "pair_pattern":
            self._push(_Action.DECLARE, node.child_by_field_name("value"), scope)
            key = node.child_by_field_name("key")
            if key is not None and key.type == "property_identifier":
                self._property(key, scope)
            else:
                self._push(_Action.VISIT, key, scope)
        elif kind in ("object_pattern", "array_pattern", "rest_pattern"):
            self._push_all(
                _Action.DECLARE,
                [child for child in node.named_children if child.type != "comment"],
                scope,
            )
        else:
            # Member targets and defaults are plain references
            self._visit(node, scope)

    # ------------------------------------------------------------------
    # Visitors
    # ------------------------------------------------------------------

    def _visit_identifier(self, node: Any, scope: int) -> None:
        self._occurrence(node, scope)

    def _visit_shorthand_property(self, node: Any, scope: int) -> None:
        # ``{a}`` both reads ``a`` and defines the key ``a``
        self._occurrence(node, scope)
        self._property(node, scope)

    def _visit_property_identifier(self, node: Any, scope: int) -> None:
        self._property(node, scope)

    def _visit_member_expression(self, node: Any, scope: int) -> None:
        obj = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        if prop is not None and prop.type == "property_identifier":
            self._property(prop, scope)
            if obj is not None and obj.type == "identifier":
                self._tree.add_association(
                    scope, self._result.node_text(obj), self._result.node_text(prop)
                )
        self._push(_Action.VISIT, obj, scope)

    def _open_function(self, node: Any, scope: int) -> int:
        child = self._tree.add_child(scope, self._range(node), ScopeKind.FUNCTION)
        self._push(_Action.VISIT, node.child_by_field_name("body"), child)
        params = node.child_by_field_name("parameters")
        if params is not None:
            self._push_children(_Action.DECLARE, params, child)
        return child

    def _visit_function_declaration(self, node: Any, scope: int) -> None:
        self._open_function(node, scope)
        name = node.child_by_field_name("name")
        if name is not None:
            self._declaration(name, scope)

    def _visit_function_expression(self, node: Any, scope: int) -> None:
        child = self._open_function(node, scope)
        name = node.child_by_field_name("name")
        if name is not None:
            self._declaration(name, child)

    def _visit_arrow_function(self, node: Any, scope: int) -> None:
        child = self._open_function(node, scope)
        param = node.child_by_field_name("parameter")
        if param is not None:
            self._declaration(param, child)

    def _visit_method_definition(self, node: Any, scope: int) -> None:
        child_scope = self._open_function(node, scope)
        name = node.child_by_field_name("name")
        if name is not None and name.type == "property_identifier":
            self._property(name, scope)
        else:
            # Computed keys lie inside the method's range
            self._push(_Action.VISIT, name, child_scope)
        for child in node.named_children:
            if child.type == "decorator":
                self._push(_Action.VISIT, child, child_scope)

    def _visit_catch_clause(self, node: Any, scope: int) -> None:
        child = self._tree.add_child(scope, self._range(node), ScopeKind.CATCH)
        self._push(_Action.VISIT, node.child_by_field_name("body"), child)
        self._push(_Action.DECLARE, node.child_by_field_name("parameter"), child)

    def _visit_variable_declarator(self, node: Any, scope: int) -> None:
        self._push(_Action.VISIT, node.child_by_field_name("value"), scope)
        self._push(_Action.DECLARE, node.child_by_field_name("name"), scope)

    def _visit_class_declaration(self, node: Any, scope: int) -> None:
        name = node.child_by_field_name("name")
        self._push_all(
            _Action.VISIT, [child for child in node.named_children if child != name], scope
        )
        if name is not None:
            self._declaration(name, scope)

    def _visit_import_statement(self, node: Any, scope: int) -> None:
        for clause in node.named_children:
            if clause.type != "import_clause":
                continue
            for part in clause.named_children:
                if part.type == "identifier":
                    self._declaration(part, scope)
                elif part.type == "namespace_import":
                    for ident in part.named_children:
                        if ident.type == "identifier":
                            self._declaration(ident, scope)
                elif part.type == "named_imports":
                    for specifier in part.named_children:
                        if specifier.type != "import_specifier":
                            continue
                        local = specifier.child_by_field_name(
                            "alias"
                        ) or specifier.child_by_field_name("name")
                        if local is not None and local.type == "identifier":
                            self._declaration(local, scope)

    def _visit_for_in_statement(self, node: Any, scope: int) -> None:
        self._push(_Action.VISIT, node.child_by_field_name("body"), scope)
        self._push(_Action.VISIT, node.child_by_field_name("right"), scope)
        self._push(_Action.VISIT, node.child_by_field_name("value"), scope)
        left = node.child_by_field_name("left")
        declares = any(
            not child.is_named and child.type in ("var", "let", "const") for child in node.children
        )
        self._push(_Action.DECLARE if declares else _Action.VISIT, left, scope)


def build_scope_tree(result: ParseResult) -> ScopeTree:
    """Build the scope tree of an error-free parse."""
    return ScopeBuilder(result).build()
