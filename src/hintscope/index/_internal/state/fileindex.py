"""Per-file index state owned by the coordinator.

All fields are read and written on the event loop thread only.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass, field, replace

from hintscope.index.models import Association, HintToken, ScopeInfo
from hintscope.index.scope import Scope, ScopeTree
from hintscope.index.sources import directory_of
from hintscope.index._internal.parsing import ParsedFile


@dataclass
class PendingRequest:
    """An inner-scope lookup waiting for the first outer scope."""

    offset: int
    future: asyncio.Future[ScopeInfo]


@dataclass(frozen=True)
class FileStatus:
    """Snapshot of a file's freshness flags."""

    path: str
    has_outer_scope: bool
    outer_dirty: bool
    inner_dirty: bool
    parse_in_flight: bool
    has_pending_request: bool
    recovered: bool


@dataclass
class FileIndex:
    """Everything known about one file.

    ``outer_scope`` is replaced wholesale on each successful parse.
    """

    path: str
    outer_scope: ScopeTree | None = None
    all_identifiers: list[HintToken] = field(default_factory=list)
    all_globals: list[str] = field(default_factory=list)
    all_properties: list[HintToken] = field(default_factory=list)
    all_associations: Counter[Association] = field(default_factory=Counter)
    outer_dirty: bool = True
    inner_dirty: bool = True
    parse_in_flight: bool = False
    force_pending: bool = False
    recovered: bool = False
    inner_scope: Scope | None = None
    inner_info: ScopeInfo | None = None
    pending: PendingRequest | None = None

    @property
    def directory(self) -> str:
        return directory_of(self.path)

    def apply(self, parsed: ParsedFile) -> None:
        """Install a parse result and invalidate the cached inner scope."""
        self.outer_scope = parsed.tree
        self.all_identifiers = parsed.identifiers
        self.all_globals = parsed.globals
        self.all_properties = [replace(token, path=self.path) for token in parsed.properties]
        self.all_associations = parsed.associations
        self.recovered = parsed.recovered
        self.inner_dirty = True

    def renamed(self, new_path: str) -> None:
        """Re-key under ``new_path``; property tokens carry the path too."""
        self.path = new_path
        self.all_properties = [replace(token, path=new_path) for token in self.all_properties]
        self.inner_scope = None
        self.inner_info = None
        self.inner_dirty = True

    def status(self) -> FileStatus:
        return FileStatus(
            path=self.path,
            has_outer_scope=self.outer_scope is not None,
            outer_dirty=self.outer_dirty,
            inner_dirty=self.inner_dirty,
            parse_in_flight=self.parse_in_flight,
            has_pending_request=self.pending is not None,
            recovered=self.recovered,
        )
