"""Ordering of hint candidates.

Candidates are ranked with comparators composed lexicographically:

Identifiers: scope depth -> distance to the cursor -> name
Properties:  association count -> same file -> distance to the cursor -> name

Comparators return a negative number, zero or a positive number, like the
``cmp`` functions ``functools.cmp_to_key`` expects.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from functools import cmp_to_key, reduce

from hintscope.index.models import HintToken
from hintscope.index.scope import Scope

MAX_HINTS = 100

Comparator = Callable[[HintToken, HintToken], float]


def lexicographic(*comparators: Comparator) -> Comparator:
    """Compose comparators; later ones only break ties of earlier ones."""

    def compose(first: Comparator, second: Comparator) -> Comparator:
        def compare(a: HintToken, b: HintToken) -> float:
            return first(a, b) or second(a, b)

        return compare

    return reduce(compose, comparators)


def _ordered(a_key: float | None, b_key: float | None) -> float:
    """Compare keys where None sorts after any value."""
    if a_key is None:
        return 0 if b_key is None else 1
    if b_key is None:
        return -1
    return (a_key > b_key) - (a_key < b_key)


def min_distance(token: HintToken, offset: int) -> float:
    if not token.positions:
        return math.inf
    return min(abs(position - offset) for position in token.positions)


def compare_by_name(a: HintToken, b: HintToken) -> float:
    return (a.value > b.value) - (a.value < b.value)


def compare_by_position(offset: int) -> Comparator:
    """Closest occurrence to ``offset`` first; no positions sorts last."""

    def compare(a: HintToken, b: HintToken) -> float:
        a_dist, b_dist = min_distance(a, offset), min_distance(b, offset)
        return _ordered(
            None if a_dist == math.inf else a_dist, None if b_dist == math.inf else b_dist
        )

    return compare


def compare_by_scope(scope: Scope | None) -> Comparator:
    """Shallower declaration first; undeclared names after declared ones."""
    depths: dict[str, int | None] = {}

    def depth(name: str) -> int | None:
        if scope is None:
            return None
        if name not in depths:
            depths[name] = scope.scope_depth_of(name)
        return depths[name]

    def compare(a: HintToken, b: HintToken) -> float:
        return _ordered(depth(a.value), depth(b.value))

    return compare


def compare_by_path(path: str | None) -> Comparator:
    """Tokens from ``path`` before tokens from other files."""

    def compare(a: HintToken, b: HintToken) -> float:
        return _ordered(0 if a.path == path else None, 0 if b.path == path else None)

    return compare


def compare_by_association(counts: Mapping[str, int]) -> Comparator:
    """More frequently associated first; unassociated after associated."""

    def compare(a: HintToken, b: HintToken) -> float:
        a_count, b_count = counts.get(a.value), counts.get(b.value)
        return _ordered(
            None if a_count is None else -a_count, None if b_count is None else -b_count
        )

    return compare


@dataclass
class IdentifierRanking:
    """Rank identifiers relative to the scope enclosing the cursor."""

    scope: Scope | None

    def comparator(self, offset: int) -> Comparator:
        return lexicographic(compare_by_scope(self.scope), compare_by_position(offset), compare_by_name)


@dataclass
class PropertyRanking:
    """Rank properties by usage on an object, origin file and distance.

    ``associations`` maps property names to how often they were seen on the
    object being completed; empty when the object is unknown.
    """

    path: str | None = None
    associations: Mapping[str, int] = field(default_factory=dict)

    @classmethod
    def for_context(
        cls, all_associations: Mapping[str, Mapping[str, int]], context: str | None, path: str | None
    ) -> PropertyRanking:
        counts = all_associations.get(context, {}) if context else {}
        return cls(path=path, associations=counts)

    def comparator(self, offset: int) -> Comparator:
        return lexicographic(
            compare_by_association(self.associations),
            compare_by_path(self.path),
            compare_by_position(offset),
            compare_by_name,
        )


Ranking = IdentifierRanking | PropertyRanking


def rank_and_filter(
    candidates: Iterable[HintToken],
    ranking: Ranking,
    offset: int,
    query: str = "",
    *,
    limit: int = MAX_HINTS,
) -> list[HintToken]:
    """Keep candidates starting with ``query``, order them, keep the first ``limit``."""
    matching = [token for token in candidates if token.value.startswith(query)]
    matching.sort(key=cmp_to_key(ranking.comparator(offset)))
    return matching[:limit]
