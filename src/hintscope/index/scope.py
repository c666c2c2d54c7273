"""Lexical scope tree.

A ``ScopeTree`` is an arena: scope records live in a flat list and refer to
their parent and children by index, so a whole tree is one independently
owned value that can be swapped out on reparse. ``Scope`` is a lightweight
handle ``(tree, index)`` that exposes the queries used by the coordinator and
the ranker.

Invariants:
- Every child range lies within its parent's range.
- Sibling ranges are pairwise disjoint and kept in ascending start order,
  so descent towards a position is deterministic.
- Identifier occurrences are attributed to the scope that was current when
  the builder met them (the innermost enclosing function or catch scope).

Only function bodies and catch clauses open scopes; blocks do not.
"""

from __future__ import annotations

import bisect
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from hintscope.core.errors import InternalError
from hintscope.index.models import Association, Identifier, PropertyToken, TextRange


class ScopeKind(Enum):
    """What introduced a scope."""

    PROGRAM = "program"
    FUNCTION = "function"
    CATCH = "catch"


@dataclass(slots=True)
class _ScopeRecord:
    parent: int | None
    range: TextRange
    kind: ScopeKind
    declarations: list[Identifier] = field(default_factory=list)
    identifier_occurrences: list[Identifier] = field(default_factory=list)
    property_occurrences: list[PropertyToken] = field(default_factory=list)
    associations: list[Association] = field(default_factory=list)
    children: list[int] = field(default_factory=list)


class ScopeTree:
    """Arena of scope records rooted at the whole-file scope (index 0).

    Mutators are only used while the builder populates the tree; once
    ``freeze()`` has been called the tree is read-only.
    """

    def __init__(self, root_range: TextRange) -> None:
        self._records: list[_ScopeRecord] = [
            _ScopeRecord(parent=None, range=root_range, kind=ScopeKind.PROGRAM)
        ]
        self._frozen = False

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"ScopeTree(scopes={len(self._records)}, range={self.root.range})"

    @property
    def root(self) -> Scope:
        return Scope(self, 0)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def scope(self, index: int) -> Scope:
        if not 0 <= index < len(self._records):
            raise IndexError(f"No scope with index {index}")
        return Scope(self, index)

    def scopes(self) -> Iterator[Scope]:
        """All scopes in pre-order."""
        return self.root.walk()

    # ------------------------------------------------------------------
    # Construction (builder only)
    # ------------------------------------------------------------------

    def freeze(self) -> ScopeTree:
        self._frozen = True
        return self

    def set_root_range(self, root_range: TextRange) -> None:
        self._check_mutable()
        self._records[0].range = root_range

    def add_child(self, parent: int, child_range: TextRange, kind: ScopeKind) -> int:
        """Create a child scope under ``parent``, keeping children ordered by start."""
        self._check_mutable()
        parent_record = self._records[parent]
        siblings = parent_record.children
        starts = [self._records[i].range.start for i in siblings]
        slot = bisect.bisect_right(starts, child_range.start)

        for neighbour in siblings[max(slot - 1, 0) : slot + 1]:
            if self._records[neighbour].range.overlaps(child_range):
                raise InternalError.unexpected(
                    "overlapping sibling scopes",
                    existing=str(self._records[neighbour].range),
                    new=str(child_range),
                )

        index = len(self._records)
        self._records.append(_ScopeRecord(parent=parent, range=child_range, kind=kind))
        siblings.insert(slot, index)
        return index

    def declare(self, index: int, identifier: Identifier) -> None:
        self._check_mutable()
        self._records[index].declarations.append(identifier)

    def add_identifier_occurrence(self, index: int, identifier: Identifier) -> None:
        self._check_mutable()
        self._records[index].identifier_occurrences.append(identifier)

    def add_property_occurrence(self, index: int, token: PropertyToken) -> None:
        self._check_mutable()
        self._records[index].property_occurrences.append(token)

    def add_association(self, index: int, object_name: str, property_name: str) -> None:
        self._check_mutable()
        self._records[index].associations.append((object_name, property_name))

    def _check_mutable(self) -> None:
        if self._frozen:
            raise InternalError.unexpected("scope tree is frozen")

    def _record(self, index: int) -> _ScopeRecord:
        return self._records[index]


class Scope:
    """Handle on one scope of a ``ScopeTree``.

    Handles are cheap and compare equal when they point at the same scope of
    the same tree.
    """

    __slots__ = ("_tree", "_index")

    def __init__(self, tree: ScopeTree, index: int) -> None:
        self._tree = tree
        self._index = index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Scope):
            return NotImplemented
        return self._tree is other._tree and self._index == other._index

    def __hash__(self) -> int:
        return hash((id(self._tree), self._index))

    def __repr__(self) -> str:
        names = ", ".join(d.name for d in self.declarations)
        return f"Scope(#{self._index} {self.kind.value} [{self.range.start}, {self.range.end}) {{{names}}})"

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    def tree(self) -> ScopeTree:
        return self._tree

    @property
    def index(self) -> int:
        return self._index

    @property
    def _data(self) -> _ScopeRecord:
        return self._tree._record(self._index)

    @property
    def range(self) -> TextRange:
        return self._data.range

    @property
    def kind(self) -> ScopeKind:
        return self._data.kind

    @property
    def declarations(self) -> tuple[Identifier, ...]:
        return tuple(self._data.declarations)

    @property
    def identifier_occurrences(self) -> tuple[Identifier, ...]:
        return tuple(self._data.identifier_occurrences)

    @property
    def property_occurrences(self) -> tuple[PropertyToken, ...]:
        return tuple(self._data.property_occurrences)

    @property
    def associations(self) -> tuple[Association, ...]:
        return tuple(self._data.associations)

    @property
    def parent(self) -> Scope | None:
        parent = self._data.parent
        return None if parent is None else Scope(self._tree, parent)

    @property
    def children(self) -> list[Scope]:
        return [Scope(self._tree, i) for i in self._data.children]

    @property
    def is_root(self) -> bool:
        return self._data.parent is None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_innermost_scope(self, pos: int) -> Scope | None:
        """Deepest scope at or below this one whose range contains ``pos``.

        Returns None when ``pos`` is outside this scope's range.
        """
        if not self.range.contains(pos):
            return None
        index = self._index
        while (child := self._child_containing(index, pos)) is not None:
            index = child
        return Scope(self._tree, index)

    def contains_position_exact(self, pos: int) -> bool:
        """True iff ``pos`` is in this scope but in none of its children."""
        return self.range.contains(pos) and self._child_containing(self._index, pos) is None

    def is_declared_here(self, name: str) -> bool:
        return any(d.name == name for d in self._data.declarations)

    def scope_depth_of(self, name: str) -> int | None:
        """Hops from this scope to the nearest enclosing scope declaring ``name``.

        0 means declared here; None means not declared anywhere up to the root.
        """
        depth = 0
        scope: Scope | None = self
        while scope is not None:
            if scope.is_declared_here(name):
                return depth
            scope = scope.parent
            depth += 1
        return None

    def visible_declarations(self) -> list[Identifier]:
        """Declarations visible from this scope, innermost first."""
        result: list[Identifier] = []
        scope: Scope | None = self
        while scope is not None:
            result.extend(scope._data.declarations)
            scope = scope.parent
        return result

    def walk(self) -> Iterator[Scope]:
        """This scope and all descendants, pre-order, children by range."""
        stack = [self._index]
        while stack:
            index = stack.pop()
            yield Scope(self._tree, index)
            stack.extend(reversed(self._tree._record(index).children))

    def describe(self) -> str:
        """Bracketed dump: ``[start names : children end]``."""
        names = ", ".join(d.name for d in self._data.declarations)
        inner = "; ".join(child.describe() for child in self.children)
        if inner:
            return f"[{self.range.start} {names} : {inner} {self.range.end}]"
        return f"[{self.range.start} {names} {self.range.end}]"

    def _child_containing(self, index: int, pos: int) -> int | None:
        records = self._tree._records
        for child in records[index].children:
            child_range = records[child].range
            if child_range.start > pos:
                break
            if child_range.contains(pos):
                return child
        return None
