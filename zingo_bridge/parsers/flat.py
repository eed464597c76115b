"""Parser for the flat ``key: value`` diagnostics printed by ``balance``."""

from __future__ import annotations

import re
from typing import Iterable

from ..config import settings
from .extract import strip_ansi
from .results import ParseResult

_NUMBER_PATTERN = re.compile(r"^[+-]?\d+(?:\.\d+)?$")
_BRACKETS = {"[", "]"}


def coerce_number(value: str) -> int | float | str:
    """Convert *value* to a number when it is one once ``_`` is removed."""

    candidate = value.replace("_", "")
    if not _NUMBER_PATTERN.match(candidate):
        return value
    if "." in candidate:
        return float(candidate)
    return int(candidate)


def parse_flat(text: str, noise_prefixes: Iterable[str] | None = None) -> ParseResult:
    """Collect ``key: value`` lines of *text* into a flat mapping.

    Blank lines, lone brackets and banner lines starting with one of
    *noise_prefixes* are ignored. Lines that do not split into a non-empty key
    and value are skipped and reported through a ``partial`` status. A
    repeated key keeps its last value.
    """

    prefixes = tuple(settings.noise_prefixes if noise_prefixes is None else noise_prefixes)
    result: dict[str, int | float | str] = {}
    skipped: list[str] = []

    for raw_line in strip_ansi(text or "").splitlines():
        line = raw_line.strip()
        if not line or line in _BRACKETS:
            continue
        if prefixes and line.startswith(prefixes):
            continue

        key, separator, value = line.partition(":")
        key = key.strip()
        value = value.strip()
        if not separator or not key or not value:
            skipped.append(line)
            continue
        result[key] = coerce_number(value)

    if skipped:
        return ParseResult.partial(result, raw="\n".join(skipped), skipped=len(skipped))
    return ParseResult.parsed(result)


__all__ = ["coerce_number", "parse_flat"]
