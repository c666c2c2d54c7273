"""Editor change events and the reparse heuristic."""

from __future__ import annotations

import re
from dataclasses import dataclass

_IDENTIFIER_TEXT = re.compile(r"[A-Za-z0-9_$]+")


@dataclass(frozen=True)
class TextChange:
    """One edit: the replaced line span and the inserted text."""

    from_line: int
    to_line: int
    text: str = ""


def is_significant_change(change: TextChange) -> bool:
    """Whether an edit can change the scope structure of a file.

    Edits spanning lines are significant. A single-line edit is not when it
    only deletes text or inserts identifier characters (typing a name cannot
    open or close a function). Anything else, punctuation included, is.
    """
    if change.from_line != change.to_line or "\n" in change.text:
        return True
    if change.text == "":
        return False
    return _IDENTIFIER_TEXT.fullmatch(change.text) is None
