"""Asset filename tokenizer."""

from __future__ import annotations

import re
from typing import Any

from .aliases import (
    ARCH_ALIASES,
    EXTENSION_ALIASES,
    LIBC_ALIASES,
    MAX_WINDOW,
    METADATA_SUFFIXES,
    OS_ALIASES,
    WINDOW_ALIASES,
)
from .models import ArchiveKind, AssetTokens


_BOUNDARY_RE = re.compile(r"[^a-z0-9]+")

_SINGLE_TABLES: tuple[tuple[str, dict[str, Any]], ...] = (
    ("os", OS_ALIASES),
    ("arch", ARCH_ALIASES),
    ("libc", LIBC_ALIASES),
)

_EXTENSION_SUFFIXES: tuple[str, ...] = tuple(
    sorted({"." + ".".join(key) for key in EXTENSION_ALIASES}, key=len, reverse=True)
)


def split_segments(name: str) -> list[str]:
    return [s for s in _BOUNDARY_RE.split(name.lower()) if s]


def _split_tail(segments: list[str]) -> tuple[list[str], ArchiveKind | None, bool]:
    """Separate a trailing extension or metadata suffix from the name body."""
    if segments and segments[-1] in METADATA_SUFFIXES:
        return segments[:-1], None, True

    widths = sorted({len(key) for key in EXTENSION_ALIASES}, reverse=True)
    for width in widths:
        if len(segments) < width:
            continue
        kind = EXTENSION_ALIASES.get(tuple(segments[-width:]))
        if kind is not None:
            return segments[:-width], kind, False
    return segments, None, False


def _window_matches(body: list[str]) -> tuple[dict[int, dict[str, Any]], set[int]]:
    matches: dict[int, dict[str, Any]] = {}
    consumed: set[int] = set()
    for width in range(min(MAX_WINDOW, len(body)), 1, -1):
        for start in range(len(body) - width + 1):
            span = range(start, start + width)
            if any(i in consumed for i in span):
                continue
            fields = WINDOW_ALIASES.get(tuple(body[start : start + width]))
            if fields is None:
                continue
            matches[start] = fields
            consumed.update(span)
    return matches, consumed


def tokenize(name: str) -> AssetTokens:
    """Parse an asset filename into recognized platform tokens.

    Windows of several segments are matched before single segments. When two
    segments name the same field, the one further left wins. Never raises.
    """
    body, extension, metadata = _split_tail(split_segments(name))
    matches, consumed = _window_matches(body)

    leftover: list[str] = []
    for index, segment in enumerate(body):
        if index in consumed:
            continue
        for field_name, table in _SINGLE_TABLES:
            value = table.get(segment)
            if value is not None:
                matches[index] = {field_name: value}
                break
        else:
            leftover.append(segment)

    found: dict[str, Any] = {}
    for index in sorted(matches):
        for field_name, value in matches[index].items():
            found.setdefault(field_name, value)

    return AssetTokens(
        raw=name,
        os=found.get("os"),
        arch=found.get("arch"),
        libc=found.get("libc"),
        extension=extension,
        metadata=metadata,
        leftover=tuple(leftover),
    )


def strip_archive_extension(name: str) -> str:
    """Return ``name`` without a recognized archive suffix such as ``.tar.gz``."""
    lower = name.lower()
    for suffix in _EXTENSION_SUFFIXES:
        if lower.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return name
