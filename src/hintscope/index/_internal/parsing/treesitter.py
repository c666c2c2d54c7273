"""Tree-sitter parsing of JavaScript source text.

Wraps the ``tree-sitter-javascript`` grammar and reports, alongside the
syntax tree:

- the location of the first syntax error (``ERROR`` or ``MISSING`` node),
  which drives the line-blanking retry in the parse pipeline
- a byte-to-character offset map, since tree-sitter reports UTF-8 byte
  offsets while editors address text by character index
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

import tree_sitter
import tree_sitter_javascript

JAVASCRIPT = tree_sitter.Language(tree_sitter_javascript.language())


class OffsetMap:
    """Converts UTF-8 byte offsets of a text to character offsets."""

    __slots__ = ("_byte_to_char",)

    def __init__(self, text: str) -> None:
        if text.isascii():
            self._byte_to_char: list[int] | None = None
            return
        mapping: list[int] = []
        for index, char in enumerate(text):
            mapping.extend([index] * len(char.encode("utf-8")))
        mapping.append(len(text))
        self._byte_to_char = mapping

    def to_char(self, byte_offset: int) -> int:
        if self._byte_to_char is None:
            return byte_offset
        return self._byte_to_char[byte_offset]


@dataclass
class SyntaxErrorLocation:
    """First syntax error in a tree."""

    line: int  # 1-based
    offset: int  # character offset
    kind: str  # ERROR or the missing node's type


@dataclass
class ParseResult:
    """Result of parsing one text."""

    tree: Any  # tree_sitter.Tree
    root_node: Any  # tree_sitter.Node
    source: bytes
    offsets: OffsetMap
    text_length: int
    first_error: SyntaxErrorLocation | None

    @property
    def ok(self) -> bool:
        return self.first_error is None

    def node_text(self, node: Any) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def start_offset(self, node: Any) -> int:
        return self.offsets.to_char(node.start_byte)

    def end_offset(self, node: Any) -> int:
        return self.offsets.to_char(node.end_byte)


class JavaScriptParser:
    """Tree-sitter parser bound to the JavaScript grammar.

    A tree-sitter ``Parser`` must not be shared between threads; use
    ``JavaScriptParser.for_current_thread()`` from worker code.

    Usage::

        parser = JavaScriptParser.for_current_thread()
        result = parser.parse("function f(x) { return x; }")
        if result.ok:
            ...
    """

    _local = threading.local()

    def __init__(self) -> None:
        self._parser = tree_sitter.Parser(JAVASCRIPT)

    @classmethod
    def for_current_thread(cls) -> JavaScriptParser:
        parser: JavaScriptParser | None = getattr(cls._local, "parser", None)
        if parser is None:
            parser = cls()
            cls._local.parser = parser
        return parser

    def parse(self, text: str) -> ParseResult:
        source = text.encode("utf-8")
        tree = self._parser.parse(source)
        offsets = OffsetMap(text)
        root = tree.root_node
        return ParseResult(
            tree=tree,
            root_node=root,
            source=source,
            offsets=offsets,
            text_length=len(text),
            first_error=_find_first_error(root, offsets) if root.has_error else None,
        )


def _find_first_error(root: Any, offsets: OffsetMap) -> SyntaxErrorLocation | None:
    """Locate the first ERROR or MISSING node in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return SyntaxErrorLocation(
                line=node.start_point[0] + 1,
                offset=offsets.to_char(node.start_byte),
                kind=node.type if node.is_missing else "ERROR",
            )
        # Only descend into subtrees that contain an error
        stack.extend(child for child in reversed(node.children) if child.has_error or child.is_missing)
    return None
