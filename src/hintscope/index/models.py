"""Value types shared by the scope tree, the parse pipeline and the ranker.

All positions are character offsets into the source text (not byte
offsets), so they line up with editor cursor indices.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hintscope.index.scope import Scope


@dataclass(frozen=True, slots=True)
class TextRange:
    """Half-open ``[start, end)`` span of character offsets."""

    start: int
    end: int

    def contains(self, pos: int) -> bool:
        return self.start <= pos < self.end

    def covers(self, other: TextRange) -> bool:
        """True if ``other`` lies entirely within this range."""
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: TextRange) -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True, slots=True)
class Identifier:
    """A bound or referenced identifier and where it appears."""

    name: str
    position: int


@dataclass(frozen=True, slots=True)
class PropertyToken:
    """A ``.name`` access or object-literal key and where it appears."""

    name: str
    position: int


Association = tuple[str, str]  # (object_name, property_name)


class HintKind(Enum):
    """Where a hint candidate came from."""

    IDENTIFIER = "identifier"
    GLOBAL = "global"
    KEYWORD = "keyword"
    PROPERTY = "property"


@dataclass(frozen=True, slots=True)
class HintToken:
    """A completion candidate.

    ``positions`` lists every offset where the name occurs in its file and
    drives the proximity ranking; globals and keywords have none.
    ``path`` is set for properties (same-file ranking) and ``level`` for
    identifiers filtered against a scope (0 = declared in that scope).
    """

    value: str
    positions: tuple[int, ...] = ()
    kind: HintKind = HintKind.IDENTIFIER
    path: str | None = None
    level: int | None = None


@dataclass(slots=True)
class TokenCollector:
    """Groups name occurrences by name, keeping first-seen order."""

    positions: dict[str, list[int]] = field(default_factory=dict)

    def add(self, name: str, position: int) -> None:
        self.positions.setdefault(name, []).append(position)

    def tokens(self, kind: HintKind, path: str | None = None) -> list[HintToken]:
        return [
            HintToken(value=name, positions=tuple(sorted(offsets)), kind=kind, path=path)
            for name, offsets in self.positions.items()
        ]


@dataclass(slots=True)
class ScopeInfo:
    """Result of an inner-scope lookup.

    ``scope`` is None when the file has never parsed; the lists then only
    hold keywords. ``fresh`` is False when the cached lookup was reused.
    """

    scope: Scope | None
    identifiers: list[HintToken]
    properties: list[HintToken]
    associations: dict[str, dict[str, int]]
    fresh: bool = True
    recovered: bool = False

    @property
    def degraded(self) -> bool:
        return self.scope is None
