"""Lexical scope index for JavaScript files.

Public surface:
- ScopeCoordinator: per-file freshness tracking and inner-scope lookups
- ScopeTree / Scope: the scope tree and its queries
- parse_text: one-shot parse of a text into a scope tree
"""

from hintscope.index.aggregate import merge_associations, merge_properties
from hintscope.index.changes import TextChange, is_significant_change
from hintscope.index.models import (
    HintKind,
    HintToken,
    Identifier,
    PropertyToken,
    ScopeInfo,
    TextRange,
)
from hintscope.index.ops import ScopeCoordinator
from hintscope.index.scope import Scope, ScopeKind, ScopeTree
from hintscope.index.sources import FileSystemSource, MemorySource, TextSource
from hintscope.index._internal.parsing import ParsedFile, parse_text
from hintscope.index._internal.state.fileindex import FileStatus

__all__ = [
    "ScopeCoordinator",
    "FileStatus",
    "Scope",
    "ScopeKind",
    "ScopeTree",
    "ScopeInfo",
    "HintKind",
    "HintToken",
    "Identifier",
    "PropertyToken",
    "TextRange",
    "TextChange",
    "is_significant_change",
    "merge_associations",
    "merge_properties",
    "ParsedFile",
    "parse_text",
    "FileSystemSource",
    "MemorySource",
    "TextSource",
]
