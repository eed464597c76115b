"""Helpers to locate structured regions inside noisy terminal output."""

from __future__ import annotations

import re
from typing import Iterator

# CSI sequences (colours, cursor moves) and OSC sequences (window titles).
_ANSI_PATTERN = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")


def strip_ansi(text: str) -> str:
    """Remove terminal escape sequences from *text*."""

    return _ANSI_PATTERN.sub("", text)


def find_balanced(text: str, start: int = 0) -> tuple[int, int] | None:
    """Return the ``(begin, end)`` span of the first balanced ``{...}`` region.

    Scanning starts at the first ``{`` at or after *start* and counts brace
    depth until it returns to zero. ``None`` means there is no ``{`` or the
    region is still incomplete.
    """

    begin = text.find("{", start)
    if begin == -1:
        return None

    depth = 0
    for index in range(begin, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return begin, index + 1
    return None


def extract_balanced(text: str) -> str | None:
    """Return the minimal balanced region starting at the first ``{``."""

    span = find_balanced(text)
    if span is None:
        return None
    return text[span[0] : span[1]]


def iter_balanced(text: str) -> Iterator[str]:
    """Yield every consecutive complete ``{...}`` region of *text*."""

    position = 0
    while True:
        span = find_balanced(text, position)
        if span is None:
            return
        yield text[span[0] : span[1]]
        position = span[1]


__all__ = ["extract_balanced", "find_balanced", "iter_balanced", "strip_ansi"]
