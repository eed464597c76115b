"""Single spawn-run-exit invocations of zingo-cli."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Callable

from ..config import settings
from ..logging import get_logger, wallet_context
from ..models import WalletIdentity
from ..parsers.results import ParseResult
from .exceptions import CommandTimeoutError, ProcessSpawnError, ToolExecutionError
from .supervisor import ensure_executable


class OneShotRunner:
    """Run zingo-cli for exactly one command and capture all of its output.

    No pooling and no correlation is involved: everything the process prints
    before exiting belongs to the single command.
    """

    def __init__(self, *, executable: str | None = None, timeout: float | None = None) -> None:
        self.executable = executable or settings.zingo_cli
        self.timeout = settings.oneshot_timeout if timeout is None else timeout
        self._logger = get_logger(__name__)

    async def run(self, identity: WalletIdentity, *args: str) -> str:
        """Return the stdout of ``zingo-cli <identity args> <args>``."""

        executable = ensure_executable(self.executable)
        command = " ".join(args[:1])
        with wallet_context(**identity.as_dict(), command=command):
            try:
                process = await asyncio.create_subprocess_exec(
                    executable,
                    *identity.cli_args(),
                    *args,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as exc:
                self._logger.error("zingo.oneshot.spawn_failed", error=str(exc))
                raise ProcessSpawnError(executable, exc) from exc

            try:
                stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
            except asyncio.TimeoutError as exc:
                await self._reap(process)
                self._logger.warning("zingo.oneshot.timeout", timeout=self.timeout)
                raise CommandTimeoutError(command, self.timeout) from exc
            except BaseException:
                await self._reap(process)
                self._logger.warning("zingo.oneshot.interrupted", pid=process.pid)
                raise

            output = stdout.decode("utf-8", errors="replace")
            error_output = stderr.decode("utf-8", errors="replace")
            if process.returncode != 0:
                self._logger.error(
                    "zingo.oneshot.failed",
                    return_code=process.returncode,
                    stderr=error_output.strip(),
                )
                raise ToolExecutionError(command, process.returncode, error_output)

            self._logger.info("zingo.oneshot.completed", size=len(output))
            return output

    async def invoke(
        self,
        identity: WalletIdentity,
        *args: str,
        parser: Callable[[str], ParseResult],
    ) -> ParseResult:
        """Run a command and feed its whole output to *parser*."""

        output = await self.run(identity, *args)
        return parser(output)

    @staticmethod
    async def _reap(process: asyncio.subprocess.Process) -> None:
        """Kill *process* if it is still running and wait for it to exit."""

        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
        await asyncio.shield(process.wait())


__all__ = ["OneShotRunner"]
