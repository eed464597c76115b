"""Repair parser for the JSON-like objects printed by zingo-cli.

zingo-cli prints objects that are almost JSON: keys are often bare, numbers
use ``_`` as a digit-group separator and trailing commas are common. The
repairs below normalise those quirks, always leaving the contents of quoted
string literals untouched, before handing the text to :func:`json.loads`.
"""

from __future__ import annotations

import json
import re

from ..logging import get_logger
from .extract import iter_balanced, strip_ansi
from .results import ParseResult, single_or_many

logger = get_logger(__name__)

_STRING = r'"(?:\\.|[^"\\])*"'
_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
_DIGIT_GROUP_PATTERN = re.compile(rf"({_STRING})|(?<=\d)_(?=\d)")
_BARE_KEY_PATTERN = re.compile(rf'({_STRING})|(?<![\w"])([A-Za-z_]\w*):')
_TRAILING_COMMA_PATTERN = re.compile(rf"({_STRING})|,(\s*[}}\]])")


def _remove_digit_groups(text: str) -> str:
    return _DIGIT_GROUP_PATTERN.sub(lambda m: m.group(1) or "", text)


def _quote_bare_keys(text: str) -> str:
    def replace(match: re.Match[str]) -> str:
        if match.group(1) is not None:
            return match.group(1)
        return f'"{match.group(2)}":'

    return _BARE_KEY_PATTERN.sub(replace, text)


def _remove_trailing_commas(text: str) -> str:
    def replace(match: re.Match[str]) -> str:
        if match.group(1) is not None:
            return match.group(1)
        return match.group(2)

    return _TRAILING_COMMA_PATTERN.sub(replace, text)


def repair_json(text: str) -> str:
    """Apply the zingo-specific repairs in their fixed order."""

    repaired = _remove_digit_groups(text)
    repaired = _quote_bare_keys(repaired)
    return _remove_trailing_commas(repaired)


def parse_object(text: str) -> ParseResult:
    """Parse the object spanning the first ``{`` to the last ``}`` of *text*.

    Never raises: output that still is not JSON after repair yields a
    ``partial`` result whose value is ``{"raw": <matched text>}``, and output
    without any object yields a ``failed`` result.
    """

    cleaned = strip_ansi(text or "")
    match = _OBJECT_PATTERN.search(cleaned)
    if match is None:
        logger.warning("zingo.parse.object_missing", size=len(cleaned))
        return ParseResult.failed(text)

    candidate = match.group(0)
    try:
        value = json.loads(repair_json(candidate))
    except json.JSONDecodeError as exc:
        logger.warning("zingo.parse.object_fallback", error=str(exc))
        return ParseResult.partial({"raw": candidate}, raw=candidate, skipped=1)
    return ParseResult.parsed(value)


def parse_objects(text: str) -> ParseResult:
    """Parse every balanced object in *text* using the single-or-many rule."""

    cleaned = strip_ansi(text or "")
    regions = list(iter_balanced(cleaned))
    if not regions:
        logger.warning("zingo.parse.objects_missing", size=len(cleaned))
        return ParseResult.failed(text)

    values = []
    rejected: list[str] = []
    for region in regions:
        result = parse_object(region)
        if result.ok:
            values.append(result.value)
        else:
            rejected.append(region)

    value = single_or_many(values)
    if rejected:
        return ParseResult.partial(value, raw="\n".join(rejected), skipped=len(rejected))
    return ParseResult.parsed(value)


__all__ = ["parse_object", "parse_objects", "repair_json"]
