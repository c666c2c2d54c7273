"""Parse pipeline: text -> ParsedFile, with line-blanking recovery.

Runs on a worker thread. Everything it returns is new and independently
owned, so the coordinator can swap it in without copying.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

import structlog

from hintscope.core.errors import MalformedNodeError, ParseFailure
from hintscope.index.models import Association, HintKind, HintToken, TokenCollector
from hintscope.index.scope import ScopeTree
from hintscope.index._internal.parsing.builder import build_scope_tree
from hintscope.index._internal.parsing.directives import scan_globals
from hintscope.index._internal.parsing.treesitter import JavaScriptParser

logger = structlog.get_logger()


@dataclass
class ParsedFile:
    """Outcome of a successful parse."""

    tree: ScopeTree
    globals: list[str]
    identifiers: list[HintToken]
    properties: list[HintToken]
    associations: Counter[Association]
    text_length: int
    attempts: int = 1

    @property
    def recovered(self) -> bool:
        """True when lines had to be blanked; such trees are lower-confidence."""
        return self.attempts > 1


def blank_line(text: str, line: int) -> str:
    """Replace 1-based ``line`` with spaces of equal length, keeping offsets stable."""
    # Rows are counted by "\n" only, as the parser counts them
    lines = text.split("\n")
    if not 1 <= line <= len(lines):
        return text
    original = lines[line - 1]
    body = original.rstrip("\r")
    lines[line - 1] = " " * len(body) + original[len(body) :]
    return "\n".join(lines)


def sift(tree: ScopeTree) -> tuple[list[HintToken], list[HintToken], Counter[Association]]:
    """Collect every identifier and property of a tree with all its positions."""
    identifiers = TokenCollector()
    properties = TokenCollector()
    associations: Counter[Association] = Counter()
    for scope in tree.scopes():
        for ident in scope.identifier_occurrences:
            identifiers.add(ident.name, ident.position)
        for prop in scope.property_occurrences:
            properties.add(prop.name, prop.position)
        associations.update(scope.associations)
    return (
        identifiers.tokens(HintKind.IDENTIFIER),
        properties.tokens(HintKind.PROPERTY),
        associations,
    )


def parse_text(text: str, max_retries: int = 0) -> ParsedFile:
    """Parse ``text`` and build its scope tree.

    Args:
        text: JavaScript source.
        max_retries: How many times the line of the first syntax error may be
            blanked before giving up. Zero for routine reparses.

    Raises:
        ParseFailure: On a syntax error once retries are exhausted, or when
            the scope builder meets an unknown node kind.
    """
    parser = JavaScriptParser.for_current_thread()
    attempts = 0
    while True:
        attempts += 1
        result = parser.parse(text)
        if result.first_error is None:
            break
        line = result.first_error.line
        if attempts > max_retries:
            logger.debug("parse_failed", line=line, attempts=attempts)
            raise ParseFailure.syntax_error(line, attempts)
        logger.debug("parse_retry", line=line, attempt=attempts)
        blanked = blank_line(text, line)
        if blanked == text:
            # Nothing left to blank on that line
            raise ParseFailure.syntax_error(line, attempts)
        text = blanked

    try:
        tree = build_scope_tree(result)
    except MalformedNodeError as e:
        logger.warning("scope_build_failed", kind=e.details.get("kind"), offset=e.details.get("offset"))
        raise ParseFailure.from_malformed(e) from e

    identifiers, properties, associations = sift(tree)
    return ParsedFile(
        tree=tree,
        globals=scan_globals(result),
        identifiers=identifiers,
        properties=properties,
        associations=associations,
        text_length=len(text),
        attempts=attempts,
    )
