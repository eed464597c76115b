"""Typed errors raised while driving zingo-cli processes."""

from __future__ import annotations

from ..parsers.results import UnparseableOutputError


class ZingoError(RuntimeError):
    """Base exception for every zingo-cli process failure."""


class ToolNotFoundError(ZingoError):
    """Raised when the configured zingo-cli executable does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"zingo-cli not found at {path}")
        self.path = path


class ProcessSpawnError(ZingoError):
    """Raised when the operating system refuses to start zingo-cli."""

    def __init__(self, path: str, error: Exception) -> None:
        super().__init__(f"Failed to start zingo-cli at {path}: {error}")
        self.path = path
        self.original_error = error


class CommandTimeoutError(ZingoError):
    """Raised when a command produced no complete response before its deadline."""

    def __init__(self, command: str, timeout: float) -> None:
        super().__init__(f"zingo-cli command '{command}' timed out after {timeout:g}s")
        self.command = command
        self.timeout = timeout


class ProcessExitedError(ZingoError):
    """Raised when a pooled process exits while a command waits for output."""

    def __init__(self, command: str, return_code: int | None, stderr: str = "") -> None:
        message = f"zingo-cli exited with code {return_code} while running '{command}'"
        if stderr:
            message = f"{message}: {stderr}"
        super().__init__(message)
        self.command = command
        self.return_code = return_code
        self.stderr = stderr


class ToolExecutionError(ZingoError):
    """Raised when a one-shot invocation exits with a non-zero status."""

    def __init__(self, command: str, return_code: int | None, stderr: str) -> None:
        super().__init__(f"Zingo CLI error: {stderr.strip() or f'exit code {return_code}'}")
        self.command = command
        self.return_code = return_code
        self.stderr = stderr


__all__ = [
    "CommandTimeoutError",
    "ProcessExitedError",
    "ProcessSpawnError",
    "ToolExecutionError",
    "ToolNotFoundError",
    "UnparseableOutputError",
    "ZingoError",
]
