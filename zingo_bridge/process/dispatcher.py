"""Request/response correlation over a pooled zingo-cli process."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Callable

from ..config import settings
from ..logging import get_logger, wallet_context
from ..models import WalletIdentity
from ..parsers.extract import extract_balanced, strip_ansi
from ..parsers.objects import parse_object
from ..parsers.results import ParseResult
from .exceptions import CommandTimeoutError, ProcessExitedError
from .pool import ProcessPool
from .supervisor import ZingoProcess

Parser = Callable[[str], ParseResult]


class CommandDispatcher:
    """Turn "write a line, read a stream" into "send a command, get one result".

    A command's response is the first complete ``{...}`` region appearing in
    the buffer after the offset recorded just before the command was written.
    Commands on the same process are serialised through the handle's command
    lock, so responses of two callers never interleave.

    When a command times out its offset is remembered on the handle. The next
    command first waits up to ``stale_grace`` seconds for that late response
    to complete, and only then records its own offset, so the late response is
    discarded instead of being read as the next command's answer.
    """

    def __init__(
        self,
        pool: ProcessPool,
        *,
        timeout: float | None = None,
        poll_interval: float | None = None,
        stale_grace: float | None = None,
    ) -> None:
        self.pool = pool
        self.timeout = settings.command_timeout if timeout is None else timeout
        self.poll_interval = settings.poll_interval if poll_interval is None else poll_interval
        self.stale_grace = settings.stale_grace if stale_grace is None else stale_grace
        self._logger = get_logger(__name__)

    async def send(
        self,
        identity: WalletIdentity,
        command: str,
        *,
        parser: Parser = parse_object,
        timeout: float | None = None,
    ) -> ParseResult:
        """Run *command* on the warm process of *identity*."""

        handle = await self.pool.acquire(identity)
        return await self.send_to(handle, command, parser=parser, timeout=timeout)

    async def send_to(
        self,
        handle: ZingoProcess,
        command: str,
        *,
        parser: Parser = parse_object,
        timeout: float | None = None,
    ) -> ParseResult:
        """Run *command* on an already acquired *handle*.

        The deadline starts when the command is written, after any queued
        command on the same handle has finished.
        """

        limit = self.timeout if timeout is None else timeout
        with wallet_context(**handle.identity.as_dict(), command=command):
            async with handle.command_lock:
                await self._settle(handle)
                return await self._exchange(handle, command, parser, limit)

    async def _exchange(
        self, handle: ZingoProcess, command: str, parser: Parser, timeout: float
    ) -> ParseResult:
        loop = asyncio.get_running_loop()
        offset = handle.offset
        try:
            await handle.send_line(command)
        except (BrokenPipeError, ConnectionResetError) as exc:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(handle.wait_closed(), timeout=1.0)
            raise ProcessExitedError(command, handle.return_code, handle.stderr_text) from exc

        started = loop.time()
        deadline = started + timeout
        self._logger.debug("zingo.dispatch.sent", offset=offset)
        while True:
            region = _scan(handle, offset)
            if region is not None:
                result = parser(region)
                self._logger.info(
                    "zingo.dispatch.resolved",
                    status=result.status.value,
                    elapsed=round(loop.time() - started, 3),
                )
                return result
            if handle.exited:
                self._logger.error("zingo.dispatch.process_exited", return_code=handle.return_code)
                raise ProcessExitedError(command, handle.return_code, handle.stderr_text)
            remaining = deadline - loop.time()
            if remaining <= 0:
                handle.abandoned_offset = offset
                self._logger.warning("zingo.dispatch.timeout", timeout=timeout)
                raise CommandTimeoutError(command, timeout)
            await handle.wait_for_output(min(remaining, self.poll_interval))

    async def _settle(self, handle: ZingoProcess) -> None:
        abandoned = handle.abandoned_offset
        if abandoned is None:
            return
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.stale_grace
        while _scan(handle, abandoned) is None and not handle.exited:
            remaining = deadline - loop.time()
            if remaining <= 0:
                self._logger.warning("zingo.dispatch.stale_unresolved", abandoned_offset=abandoned)
                break
            await handle.wait_for_output(min(remaining, self.poll_interval))
        else:
            self._logger.info("zingo.dispatch.stale_discarded", abandoned_offset=abandoned)
        handle.abandoned_offset = None


def _scan(handle: ZingoProcess, offset: int) -> str | None:
    return extract_balanced(strip_ansi(handle.buffer[offset:]))


__all__ = ["CommandDispatcher", "Parser"]
