"""Parser for the brace-delimited ledger blocks printed by ``transactions``.

The grammar has no array syntax: a nested ``{`` opens an object under the
pending ``key:`` line of the enclosing block, and when that key already
holds an object the value becomes a list. ``outgoing_tx_data:`` repeated twice
under the same parent therefore yields a list of two objects, while a
single occurrence stays a plain object.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from .extract import strip_ansi
from .results import ParseResult, single_or_many

_KEY_VALUE_PATTERN = re.compile(r"^(.+?):\s*(.*)$")
_DIGITS_PATTERN = re.compile(r"^[0-9]+$")


@dataclass(slots=True)
class _Frame:
    container: dict[str, Any] | None
    key: str | None = None


def _split_blocks(lines: list[str]) -> tuple[list[list[str]], list[str] | None]:
    """Group *lines* into top-level block bodies, outer braces excluded.

    The second item is the body of a trailing block that never closed.
    """

    blocks: list[list[str]] = []
    current: list[str] = []
    depth = 0
    for line in lines:
        if depth == 0:
            if line == "{":
                depth = 1
                current = []
            continue
        if line == "{":
            depth += 1
        elif line == "}":
            depth -= 1
            if depth == 0:
                blocks.append(current)
                continue
        current.append(line)
    return blocks, (current if depth else None)


def _attach(container: dict[str, Any], key: str, child: dict[str, Any]) -> None:
    if key not in container:
        container[key] = child
        return
    existing = container[key]
    if isinstance(existing, list):
        existing.append(child)
    elif isinstance(existing, dict):
        container[key] = [existing, child]
    else:
        container[key] = child


def _parse_block(lines: list[str]) -> tuple[dict[str, Any], list[str]]:
    root: dict[str, Any] = {}
    stack = [_Frame(root)]
    skipped: list[str] = []

    for line in lines:
        frame = stack[-1]
        if line == "{":
            if frame.container is None or frame.key is None:
                skipped.append(line)
                stack.append(_Frame(None))
                continue
            child: dict[str, Any] = {}
            _attach(frame.container, frame.key, child)
            stack.append(_Frame(child))
            continue

        if line == "}":
            if len(stack) > 1:
                stack.pop()
            continue

        match = _KEY_VALUE_PATTERN.match(line)
        if match is None:
            skipped.append(line)
            continue

        key = match.group(1).strip()
        value = match.group(2).strip()
        if not value:
            frame.key = key
            continue
        frame.key = None
        if frame.container is not None:
            frame.container[key] = int(value) if _DIGITS_PATTERN.match(value) else value

    return root, skipped


def parse_blocks(text: str) -> ParseResult:
    """Parse every top-level block of *text* using the single-or-many rule."""

    lines = [line.strip() for line in strip_ansi(text or "").splitlines()]
    blocks, unterminated = _split_blocks([line for line in lines if line])

    values = []
    skipped: list[str] = []
    for body in blocks:
        value, rejected = _parse_block(body)
        values.append(value)
        skipped.extend(rejected)
    if unterminated is not None:
        skipped.append("{")
        skipped.extend(unterminated)

    value = single_or_many(values)
    if skipped:
        return ParseResult.partial(value, raw="\n".join(skipped), skipped=len(skipped))
    return ParseResult.parsed(value)


__all__ = ["parse_blocks"]
