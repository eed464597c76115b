"""Explicit outcome type for best-effort parsing of zingo-cli output."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence


class ParseStatus(str, Enum):
    """How much of the captured output a parser could interpret."""

    PARSED = "parsed"
    PARTIAL = "partial"
    FAILED = "failed"


class UnparseableOutputError(RuntimeError):
    """Raised when a caller insists on a value from output that did not parse."""

    def __init__(self, raw: str | None, message: str | None = None) -> None:
        super().__init__(message or "zingo-cli output could not be parsed")
        self.raw = raw


@dataclass(slots=True)
class ParseResult:
    """Structured value plus the status of the parse that produced it.

    ``partial`` results still carry a usable value: the repair parser's
    ``{"raw": ...}`` fallback, or the subset of lines/blocks that could be
    read. ``raw`` keeps the text that was not understood so callers can log
    it instead of silently trusting malformed data.
    """

    status: ParseStatus
    value: Any = None
    raw: str | None = None
    skipped: int = 0

    @classmethod
    def parsed(cls, value: Any) -> "ParseResult":
        return cls(status=ParseStatus.PARSED, value=value)

    @classmethod
    def partial(cls, value: Any, raw: str | None = None, skipped: int = 0) -> "ParseResult":
        return cls(status=ParseStatus.PARTIAL, value=value, raw=raw, skipped=skipped)

    @classmethod
    def failed(cls, raw: str | None) -> "ParseResult":
        return cls(status=ParseStatus.FAILED, raw=raw)

    @property
    def ok(self) -> bool:
        return self.status is ParseStatus.PARSED

    def unwrap(self) -> Any:
        """Return the value, raising :class:`UnparseableOutputError` on failure."""

        if self.status is ParseStatus.FAILED:
            raise UnparseableOutputError(self.raw)
        return self.value


def single_or_many(items: Sequence[Any]) -> Any:
    """Return the lone item of *items*, otherwise the items as a list."""

    if len(items) == 1:
        return items[0]
    return list(items)


__all__ = [
    "ParseResult",
    "ParseStatus",
    "UnparseableOutputError",
    "single_or_many",
]
