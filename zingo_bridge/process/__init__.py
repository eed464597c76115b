"""Supervision, pooling and command correlation for zingo-cli processes."""

from .dispatcher import CommandDispatcher
from .exceptions import (
    CommandTimeoutError,
    ProcessExitedError,
    ProcessSpawnError,
    ToolExecutionError,
    ToolNotFoundError,
    UnparseableOutputError,
    ZingoError,
)
from .oneshot import OneShotRunner
from .pool import ProcessPool
from .supervisor import ProcessState, ZingoProcess

__all__ = [
    "CommandDispatcher",
    "CommandTimeoutError",
    "OneShotRunner",
    "ProcessExitedError",
    "ProcessPool",
    "ProcessSpawnError",
    "ProcessState",
    "ToolExecutionError",
    "ToolNotFoundError",
    "UnparseableOutputError",
    "ZingoError",
    "ZingoProcess",
]
