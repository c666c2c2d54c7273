"""Text sources: where the coordinator reads file text and directory listings.

The host owns the text. ``FileSystemSource`` reads from disk; ``MemorySource``
holds editor buffers (and test fixtures) keyed by path.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol


def directory_of(path: str) -> str:
    """Directory key grouping sibling files for aggregation."""
    return os.path.dirname(path)


class TextSource(Protocol):
    """What the coordinator needs from its host."""

    def read_text(self, path: str) -> str: ...

    def list_directory(self, directory: str) -> list[str]: ...


class FileSystemSource:
    """Reads files from the local file system as UTF-8."""

    def read_text(self, path: str) -> str:
        return Path(path).read_text(encoding="utf-8", errors="replace")

    def list_directory(self, directory: str) -> list[str]:
        root = Path(directory or ".")
        return sorted(str(Path(directory) / entry.name) for entry in root.iterdir() if entry.is_file())


class MemorySource:
    """In-memory text store keyed by path."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self._files: dict[str, str] = dict(files or {})

    def __contains__(self, path: str) -> bool:
        return path in self._files

    def read_text(self, path: str) -> str:
        try:
            return self._files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def list_directory(self, directory: str) -> list[str]:
        return sorted(p for p in self._files if directory_of(p) == directory)

    def set_text(self, path: str, text: str) -> None:
        self._files[path] = text

    def delete(self, path: str) -> None:
        self._files.pop(path, None)

    def rename(self, old_path: str, new_path: str) -> None:
        if old_path in self._files:
            self._files[new_path] = self._files.pop(old_path)
