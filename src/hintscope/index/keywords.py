"""JavaScript reserved words offered as identifier hints."""

from __future__ import annotations

from hintscope.index.models import HintKind, HintToken

KEYWORDS: tuple[str, ...] = (
    "break",
    "case",
    "catch",
    "class",
    "const",
    "continue",
    "debugger",
    "default",
    "delete",
    "do",
    "else",
    "export",
    "extends",
    "finally",
    "for",
    "function",
    "if",
    "import",
    "in",
    "instanceof",
    "let",
    "new",
    "return",
    "super",
    "switch",
    "this",
    "throw",
    "try",
    "typeof",
    "var",
    "void",
    "while",
    "with",
    "yield",
    "async",
    "await",
    "null",
    "true",
    "false",
    "undefined",
)


def keyword_tokens() -> list[HintToken]:
    return [HintToken(value=word, kind=HintKind.KEYWORD) for word in KEYWORDS]
