"""Cross-file aggregation of properties and associations within a directory."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from hintscope.index.models import Association, HintToken


def merge_properties(
    current: Iterable[HintToken], siblings: Iterable[Iterable[HintToken]]
) -> list[HintToken]:
    """Union of property tokens, one per name.

    The current file's token wins, so same-file ranking sees its own path.
    """
    merged: dict[str, HintToken] = {}
    for tokens in (current, *siblings):
        for token in tokens:
            merged.setdefault(token.value, token)
    return list(merged.values())


def merge_associations(
    current: Counter[Association], siblings: Iterable[Counter[Association]]
) -> dict[str, dict[str, int]]:
    """Per object name, property -> occurrence count summed over all files."""
    merged: dict[str, dict[str, int]] = {}
    for counts in (current, *siblings):
        for (obj, prop), count in counts.items():
            per_object = merged.setdefault(obj, {})
            per_object[prop] = per_object.get(prop, 0) + count
    return merged
