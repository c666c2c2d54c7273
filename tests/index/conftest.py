"""Shared fixtures for index tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from hintscope.index import MemorySource, ParsedFile, parse_text


@pytest.fixture
def parse() -> Callable[[str], ParsedFile]:
    """Parse text with no retries."""

    def _parse(text: str) -> ParsedFile:
        return parse_text(text)

    return _parse


@pytest.fixture
def source() -> MemorySource:
    """Empty in-memory text source."""
    return MemorySource()
