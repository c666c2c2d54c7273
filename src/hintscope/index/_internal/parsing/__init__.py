"""JavaScript parsing: tree-sitter wrapper, scope builder and parse pipeline."""

from hintscope.index._internal.parsing.pipeline import ParsedFile, blank_line, parse_text

__all__ = ["ParsedFile", "blank_line", "parse_text"]
