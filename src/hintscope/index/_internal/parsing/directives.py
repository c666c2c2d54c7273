"""Global-name directives in leading block comments.

Two lint conventions contribute globals to a file:

- an explicit list: ``/*global define, $: true, Worker */``
- environment presets: ``/*jslint browser: true */``, ``/*jshint node: true */``
  or ``/*eslint-env browser, node */``

Only block comments before the first statement are considered.
"""

from __future__ import annotations

import re
from typing import Any

from hintscope.index._internal.parsing.treesitter import ParseResult

ENVIRONMENTS: dict[str, tuple[str, ...]] = {
    "browser": (
        "window",
        "document",
        "navigator",
        "location",
        "history",
        "localStorage",
        "sessionStorage",
        "setTimeout",
        "clearTimeout",
        "setInterval",
        "clearInterval",
        "requestAnimationFrame",
        "XMLHttpRequest",
        "fetch",
        "Element",
        "HTMLElement",
        "Event",
        "Image",
        "FormData",
    ),
    "node": (
        "require",
        "module",
        "exports",
        "process",
        "global",
        "Buffer",
        "__dirname",
        "__filename",
        "setImmediate",
        "clearImmediate",
    ),
    "devel": ("console", "alert", "confirm", "prompt"),
    "worker": ("self", "importScripts", "postMessage", "onmessage"),
    "jquery": ("$", "jQuery"),
    "amd": ("define", "require"),
}

_DIRECTIVE = re.compile(r"^/\*\s*(global|globals|jslint|jshint|eslint-env)\b(.*?)\*/$", re.DOTALL)
_NAME = re.compile(r"^[A-Za-z_$][\w$]*$")


def _entries(body: str) -> list[tuple[str, str | None]]:
    entries: list[tuple[str, str | None]] = []
    for part in body.split(","):
        key, _, value = part.partition(":")
        key = key.strip()
        if key:
            entries.append((key, value.strip() or None))
    return entries


def parse_directive(comment: str) -> list[str]:
    """Globals contributed by one block comment (empty if it is no directive)."""
    match = _DIRECTIVE.match(comment.strip())
    if match is None:
        return []
    kind, body = match.group(1), match.group(2)
    names: list[str] = []

    if kind in ("global", "globals"):
        for key, value in _entries(body):
            if value != "false" and _NAME.match(key):
                names.append(key)
    elif kind == "eslint-env":
        for key, _ in _entries(body):
            names.extend(ENVIRONMENTS.get(key, ()))
    else:
        for key, value in _entries(body):
            if value == "true":
                names.extend(ENVIRONMENTS.get(key, ()))
    return names


def leading_comments(result: ParseResult) -> list[str]:
    comments: list[str] = []
    root: Any = result.root_node
    for child in root.named_children:
        if child.type == "hash_bang_line":
            continue
        if child.type != "comment":
            break
        text = result.node_text(child)
        if text.startswith("/*"):
            comments.append(text)
    return comments


def scan_globals(result: ParseResult) -> list[str]:
    """Deduplicated globals declared by the leading directives, in order."""
    seen: dict[str, None] = {}
    for comment in leading_comments(result):
        for name in parse_directive(comment):
            seen.setdefault(name)
    return list(seen)
