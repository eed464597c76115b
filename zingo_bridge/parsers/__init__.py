"""Parsers recovering structured data from zingo-cli terminal output."""

from .blocks import parse_blocks
from .extract import extract_balanced, find_balanced, iter_balanced, strip_ansi
from .flat import parse_flat
from .objects import parse_object, parse_objects, repair_json
from .results import ParseResult, ParseStatus, UnparseableOutputError, single_or_many

__all__ = [
    "ParseResult",
    "ParseStatus",
    "UnparseableOutputError",
    "extract_balanced",
    "find_balanced",
    "iter_balanced",
    "parse_blocks",
    "parse_flat",
    "parse_object",
    "parse_objects",
    "repair_json",
    "single_or_many",
    "strip_ansi",
]
