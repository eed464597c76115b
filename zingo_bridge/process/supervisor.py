"""Supervision of a single long-lived zingo-cli process."""

from __future__ import annotations

import asyncio
import codecs
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from ..config import settings
from ..logging import get_logger
from ..models import WalletIdentity
from .exceptions import ProcessSpawnError, ToolNotFoundError

ExitListener = Callable[["ZingoProcess"], None]

_READ_CHUNK = 4096


class ProcessState(str, Enum):
    """Lifecycle of a supervised process."""

    STARTING = "starting"
    READY = "ready"
    EXITED = "exited"


def ensure_executable(path: str) -> str:
    """Fail fast with :class:`ToolNotFoundError` when *path* is missing."""

    if not path or not Path(path).exists():
        raise ToolNotFoundError(path)
    return path


class ZingoProcess:
    """Own one zingo-cli process, its output buffer and its waiters.

    Everything the process writes to stdout is appended to :attr:`buffer`,
    which only ever grows, and every append wakes all pending waiters so each
    can re-check its own condition. stderr is logged and kept as a short tail
    for error messages, it never feeds the buffer.
    """

    def __init__(
        self,
        identity: WalletIdentity,
        *,
        executable: str | None = None,
        shutdown_timeout: float | None = None,
        stderr_tail_lines: int | None = None,
    ) -> None:
        self.identity = identity
        self.executable = executable or settings.zingo_cli
        self.shutdown_timeout = (
            settings.shutdown_timeout if shutdown_timeout is None else shutdown_timeout
        )
        self.stderr_tail_lines = (
            settings.stderr_tail_lines if stderr_tail_lines is None else stderr_tail_lines
        )
        self.state = ProcessState.STARTING
        self.process: asyncio.subprocess.Process | None = None
        self.return_code: int | None = None
        self.buffer = ""
        self.stderr_tail: list[str] = []
        self.command_lock = asyncio.Lock()
        self.abandoned_offset: int | None = None
        self._waiters: set[asyncio.Future[None]] = set()
        self._exit_listeners: list[ExitListener] = []
        self._tasks: list[asyncio.Task[None]] = []
        self._logger = get_logger(__name__).bind(**identity.as_dict())

    @classmethod
    async def spawn(cls, identity: WalletIdentity, **options: Any) -> "ZingoProcess":
        """Create and start a process for *identity*."""

        handle = cls(identity, **options)
        await handle.start()
        return handle

    @property
    def pid(self) -> int | None:
        return self.process.pid if self.process else None

    @property
    def exited(self) -> bool:
        return self.state is ProcessState.EXITED

    @property
    def offset(self) -> int:
        """Current end of the output buffer."""

        return len(self.buffer)

    @property
    def stderr_text(self) -> str:
        return "\n".join(self.stderr_tail)

    async def start(self) -> None:
        if self.process is not None:
            return
        executable = ensure_executable(self.executable)
        try:
            self.process = await asyncio.create_subprocess_exec(
                executable,
                *self.identity.cli_args(),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            self.state = ProcessState.EXITED
            self._logger.error("zingo.process.spawn_failed", error=str(exc))
            raise ProcessSpawnError(executable, exc) from exc

        self.state = ProcessState.READY
        stderr_task = asyncio.create_task(self._read_stderr(self.process))
        self._tasks = [stderr_task, asyncio.create_task(self._watch(self.process, stderr_task))]
        self._logger.info("zingo.process.spawned", pid=self.process.pid)

    async def send_line(self, text: str) -> None:
        """Write *text* followed by a newline to the process stdin."""

        if self.process is None or self.process.stdin is None or self.exited:
            raise BrokenPipeError("zingo-cli process is not running")
        self.process.stdin.write(f"{text}\n".encode("utf-8"))
        await self.process.stdin.drain()

    async def wait_for_output(self, timeout: float) -> bool:
        """Wait until new output arrives, the process exits or *timeout* passes.

        Returns ``False`` only when the timeout elapsed without a wake-up.
        """

        if self.exited:
            return True
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.add(waiter)
        try:
            await asyncio.wait_for(waiter, timeout=max(timeout, 0))
        except asyncio.TimeoutError:
            return False
        finally:
            self._waiters.discard(waiter)
        return True

    def add_exit_listener(self, listener: ExitListener) -> None:
        if self.exited:
            listener(self)
            return
        self._exit_listeners.append(listener)

    async def destroy(self) -> None:
        """Terminate the process if it is still alive; safe to call repeatedly."""

        process = self.process
        if process is None or process.returncode is not None:
            return
        self._logger.info("zingo.process.destroy", pid=process.pid)
        try:
            process.terminate()
            await asyncio.wait_for(process.wait(), timeout=self.shutdown_timeout)
        except ProcessLookupError:
            pass
        except asyncio.TimeoutError:
            self._logger.warning("zingo.process.kill", pid=process.pid)
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()
        await self.wait_closed()

    async def wait_closed(self) -> None:
        """Wait for the output readers and exit bookkeeping to finish."""

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def snapshot(self) -> dict[str, Any]:
        return {
            **self.identity.as_dict(),
            "pid": self.pid,
            "state": self.state.value,
            "return_code": self.return_code,
            "buffer_size": len(self.buffer),
            "busy": self.command_lock.locked(),
            "stderr_tail": list(self.stderr_tail),
        }

    def _notify(self) -> None:
        for waiter in list(self._waiters):
            if not waiter.done():
                waiter.set_result(None)

    async def _read_stdout(self, process: asyncio.subprocess.Process) -> None:
        stream = process.stdout
        if stream is None:
            return
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await stream.read(_READ_CHUNK)
            if not chunk:
                break
            self.buffer += decoder.decode(chunk)
            self._notify()
        tail = decoder.decode(b"", final=True)
        if tail:
            self.buffer += tail
            self._notify()

    async def _read_stderr(self, process: asyncio.subprocess.Process) -> None:
        stream = process.stderr
        if stream is None:
            return
        while True:
            line = await stream.readline()
            if not line:
                break
            text = line.decode("utf-8", errors="replace").rstrip()
            if not text:
                continue
            self.stderr_tail = (self.stderr_tail + [text])[-self.stderr_tail_lines :]
            self._logger.warning("zingo.process.stderr", line=text)

    async def _watch(
        self, process: asyncio.subprocess.Process, stderr_task: asyncio.Task[None]
    ) -> None:
        try:
            await self._read_stdout(process)
        finally:
            self.return_code = await process.wait()
            await asyncio.wait({stderr_task}, timeout=1.0)
            self.state = ProcessState.EXITED
            self._logger.warning("zingo.process.exited", return_code=self.return_code)
            self._notify()
            listeners, self._exit_listeners = self._exit_listeners, []
            for listener in listeners:
                listener(self)


__all__ = ["ExitListener", "ProcessState", "ZingoProcess", "ensure_executable"]
