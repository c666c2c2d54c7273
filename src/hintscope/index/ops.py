"""Freshness coordination of outer (whole-file) and inner (cursor) scopes.

This module implements the ScopeCoordinator - the entry point for all index
operations. It owns one ``FileIndex`` per tracked file and keeps three flags
per file consistent across an asynchronous parse pipeline:

- outer_dirty: text changed since the last dispatch. Cleared at dispatch,
  not at completion, so one dispatch is in flight per file at most
- parse_in_flight: set at dispatch, cleared when the response is processed.
  A response for a file whose flag is clear is expired and dropped
- inner_dirty: set whenever a response is applied; the cached inner scope
  is recomputed on the next lookup

Every processed response rechecks outer_dirty and redispatches, which is
what keeps a slow response from leaving the index behind the text.

All state is touched from the event loop thread only. Parsing runs in a
thread pool on a private copy of the text and returns an independent tree.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

import structlog

from hintscope.config.models import HintScopeConfig
from hintscope.core.errors import HintScopeError, InternalError, ParseFailure, StaleRequestError
from hintscope.index.aggregate import merge_associations, merge_properties
from hintscope.index.changes import TextChange, is_significant_change
from hintscope.index.keywords import keyword_tokens
from hintscope.index.models import HintKind, HintToken, ScopeInfo
from hintscope.index.sources import TextSource, directory_of
from hintscope.index._internal.parsing import ParsedFile, parse_text
from hintscope.index._internal.state.fileindex import FileIndex, FileStatus, PendingRequest

logger = structlog.get_logger()


class ScopeCoordinator:
    """Owns the per-file scope indexes of one project.

    Usage::

        async with ScopeCoordinator(MemorySource({"/p/a.js": text})) as coord:
            coord.request_outer_scope_refresh("/p/a.js")
            info = coord.get_inner_scope("/p/a.js", 12)
            if isinstance(info, asyncio.Future):
                info = await info
    """

    def __init__(
        self,
        source: TextSource,
        config: HintScopeConfig | None = None,
        *,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self._source = source
        self._config = config or HintScopeConfig()
        self._executor = executor
        self._owns_executor = executor is None
        self._files: dict[str, FileIndex] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    async def __aenter__(self) -> ScopeCoordinator:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Create the parse worker pool."""
        if self._executor is not None:
            return
        self._executor = ThreadPoolExecutor(
            max_workers=self._config.worker.max_workers,
            thread_name_prefix=self._config.worker.thread_name_prefix,
        )
        self._owns_executor = True
        logger.info("scope_coordinator_started", max_workers=self._config.worker.max_workers)

    async def stop(self) -> None:
        """Drop all state and shut the worker pool down."""
        self.reset()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        if self._executor is not None and self._owns_executor:
            self._executor.shutdown(wait=True)
            self._executor = None
        logger.info("scope_coordinator_stopped")

    def reset(self) -> None:
        """Forget every file. In-flight responses will arrive expired."""
        for entry in self._files.values():
            self._reject_pending(entry, "reset")
        dropped = len(self._files)
        self._files = {}
        logger.info("scope_index_reset", files=dropped)

    # ------------------------------------------------------------------
    # Outer scope
    # ------------------------------------------------------------------

    def request_outer_scope_refresh(self, path: str, *, force: bool = False) -> bool:
        """Dispatch a parse of ``path`` if it is stale or has never parsed.

        Idempotent: a fresh file is left alone unless ``force`` is set. A
        forced parse may blank unparseable lines up to ``parser.max_retries``
        times. Returns True if a parse was dispatched.
        """
        entry = self._entry(path)
        if entry.parse_in_flight:
            if force:
                # Picked up by the recheck when the response arrives
                entry.outer_dirty = True
                entry.force_pending = True
            return False
        if not force and not entry.outer_dirty and entry.outer_scope is not None:
            return False
        self._dispatch(entry, force=force)
        return True

    def mark_dirty(self, path: str) -> None:
        self._entry(path).outer_dirty = True

    def handle_text_change(self, path: str, change: TextChange | None = None) -> bool:
        """Editor change entry point. Returns True if a parse was dispatched.

        Without a ``change`` description every edit triggers a refresh.
        """
        self.mark_dirty(path)
        if change is not None and not is_significant_change(change):
            logger.debug("text_change_deferred", path=path)
            return False
        return self.request_outer_scope_refresh(path)

    def refresh_directory(self, path: str) -> list[str]:
        """Refresh ``path`` and its JavaScript siblings. Returns paths dispatched."""
        directory = directory_of(path)
        try:
            candidates = self._source.list_directory(directory)
        except OSError as e:
            logger.warning("directory_refresh_failed", directory=directory, error=str(e))
            candidates = []
        extensions = tuple(self._config.parser.extensions)
        paths = [p for p in candidates if p.endswith(extensions)]
        if path not in paths:
            paths.append(path)
        return [p for p in paths if self.request_outer_scope_refresh(p)]

    def rename_file(self, old_path: str, new_path: str) -> None:
        """Move the index of ``old_path`` to ``new_path`` without reparsing."""
        entry = self._files.pop(old_path, None)
        if entry is None:
            return
        replaced = self._files.pop(new_path, None)
        if replaced is not None:
            self._reject_pending(replaced, "replaced by rename")
        entry.renamed(new_path)
        self._files[new_path] = entry
        logger.info("file_renamed", old_path=old_path, new_path=new_path)
        if entry.parse_in_flight:
            # The response is keyed by the old path and will expire
            entry.parse_in_flight = False
            entry.outer_dirty = True
            if entry.pending is not None:
                self.request_outer_scope_refresh(new_path)

    def status(self, path: str) -> FileStatus | None:
        entry = self._files.get(path)
        return entry.status() if entry is not None else None

    @property
    def paths(self) -> list[str]:
        return list(self._files)

    async def wait_idle(self) -> None:
        """Wait until no parse is outstanding, follow-up dispatches included."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _entry(self, path: str) -> FileIndex:
        entry = self._files.get(path)
        if entry is None:
            entry = FileIndex(path=path)
            self._files[path] = entry
        return entry

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self.start()
        executor = self._executor
        if executor is None:
            raise InternalError.unexpected("parse worker pool unavailable")
        return executor

    def _dispatch(self, entry: FileIndex, *, force: bool = False) -> None:
        # First parses and explicitly forced ones may blank lines
        force = force or entry.force_pending or entry.outer_scope is None
        entry.parse_in_flight = True
        entry.outer_dirty = False
        entry.force_pending = False
        path = entry.path
        try:
            text = self._source.read_text(path)
        except OSError as e:
            logger.warning("read_failed", path=path, error=str(e))
            entry.parse_in_flight = False
            self._service_pending(entry)
            return

        retries = self._config.parser.max_retries if force else 0
        logger.debug("outer_scope_dispatched", path=path, force=force, length=len(text))
        task = asyncio.get_running_loop().create_task(self._parse(path, text, retries))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _parse(self, path: str, text: str, max_retries: int) -> None:
        loop = asyncio.get_running_loop()
        try:
            parsed = await loop.run_in_executor(self._get_executor(), parse_text, text, max_retries)
        except HintScopeError as e:
            self._handle_outer_scope(path, None, e)
        except Exception as e:
            logger.exception("parse_worker_failed", path=path)
            self._handle_outer_scope(path, None, InternalError.unexpected(str(e), path=path))
        else:
            self._handle_outer_scope(path, parsed, None)

    def _handle_outer_scope(
        self, path: str, parsed: ParsedFile | None, error: HintScopeError | None
    ) -> None:
        entry = self._files.get(path)
        if entry is None or not entry.parse_in_flight:
            logger.info("expired_scope_response", path=path)
            return
        entry.parse_in_flight = False

        if parsed is not None:
            entry.apply(parsed)
            logger.debug(
                "outer_scope_applied",
                path=path,
                scopes=len(parsed.tree),
                attempts=parsed.attempts,
            )
        else:
            line = error.line if isinstance(error, ParseFailure) else None
            logger.info(
                "parse_failed",
                path=path,
                error=error.error_name if error else None,
                line=line,
                kept_previous=entry.outer_scope is not None,
            )

        if entry.outer_dirty:
            self._dispatch(entry)
        self._service_pending(entry)

    # ------------------------------------------------------------------
    # Inner scope
    # ------------------------------------------------------------------

    def get_inner_scope(self, path: str, offset: int) -> ScopeInfo | asyncio.Future[ScopeInfo]:
        """Scope and candidate lists for a cursor offset.

        Returns a ``ScopeInfo`` right away when an outer scope exists (with
        ``fresh=False`` if the cached lookup still applies). Otherwise
        returns a future that resolves once the first parse lands; a later
        request for the same file rejects it with ``StaleRequestError``.

        A lookup on a file with deferred edits dispatches the reparse; the
        current tree answers until it lands.
        """
        entry = self._entry(path)
        if entry.outer_dirty and entry.outer_scope is not None:
            self.request_outer_scope_refresh(path)
        cached = entry.inner_info
        if (
            cached is not None
            and entry.inner_scope is not None
            and not entry.inner_dirty
            and entry.inner_scope.contains_position_exact(offset)
        ):
            return replace(cached, fresh=False)

        if entry.outer_scope is None:
            self._reject_pending(entry, None)
            future: asyncio.Future[ScopeInfo] = asyncio.get_running_loop().create_future()
            entry.pending = PendingRequest(offset=offset, future=future)
            logger.debug("inner_scope_pending", path=path, offset=offset)
            self.request_outer_scope_refresh(path)
            self._service_pending(entry)
            return future

        return self._compute_inner_scope(entry, offset)

    def _compute_inner_scope(self, entry: FileIndex, offset: int) -> ScopeInfo:
        tree = entry.outer_scope
        if tree is None:
            raise InternalError.unexpected(
                "inner scope requested before outer scope", path=entry.path
            )
        root = tree.root
        # Text appended past the last parse falls back to the file scope
        scope = root.find_innermost_scope(offset) or root

        candidates: list[HintToken] = []
        for token in entry.all_identifiers:
            level = scope.scope_depth_of(token.value)
            if level is not None:
                candidates.append(replace(token, level=level))
        candidates.extend(HintToken(value=name, kind=HintKind.GLOBAL) for name in entry.all_globals)
        if self._config.hints.include_keywords:
            candidates.extend(keyword_tokens())

        siblings = list(self._siblings(entry))
        info = ScopeInfo(
            scope=scope,
            identifiers=_unique(candidates),
            properties=merge_properties(entry.all_properties, (s.all_properties for s in siblings)),
            associations=merge_associations(
                entry.all_associations, (s.all_associations for s in siblings)
            ),
            recovered=entry.recovered,
        )
        entry.inner_scope = scope
        entry.inner_info = info
        entry.inner_dirty = False
        logger.debug(
            "inner_scope_recomputed",
            path=entry.path,
            offset=offset,
            scope=scope.index,
            identifiers=len(info.identifiers),
            siblings=len(siblings),
        )
        return info

    def _degraded_info(self) -> ScopeInfo:
        keywords = keyword_tokens() if self._config.hints.include_keywords else []
        return ScopeInfo(scope=None, identifiers=keywords, properties=[], associations={})

    def _siblings(self, entry: FileIndex) -> Iterable[FileIndex]:
        directory = entry.directory
        for other in self._files.values():
            if other is not entry and other.directory == directory:
                yield other

    def _service_pending(self, entry: FileIndex) -> None:
        pending = entry.pending
        if pending is None:
            return
        if entry.outer_scope is not None:
            entry.pending = None
            info = self._compute_inner_scope(entry, pending.offset)
        elif not entry.parse_in_flight:
            # Never parsed and nothing left to wait for
            entry.pending = None
            info = self._degraded_info()
        else:
            return
        if not pending.future.done():
            pending.future.set_result(info)

    def _reject_pending(self, entry: FileIndex, reason: str | None) -> None:
        pending = entry.pending
        if pending is None:
            return
        entry.pending = None
        if pending.future.done():
            return
        if reason is None:
            error = StaleRequestError.superseded(entry.path, pending.offset)
        else:
            error = StaleRequestError.discarded(entry.path, pending.offset, reason)
        pending.future.set_exception(error)
        logger.debug("stale_request_rejected", path=entry.path, offset=pending.offset, reason=reason)


def _unique(tokens: list[HintToken]) -> list[HintToken]:
    seen: set[str] = set()
    result: list[HintToken] = []
    for token in tokens:
        if token.value not in seen:
            seen.add(token.value)
            result.append(token)
    return result
