"""Registry of warm zingo-cli processes keyed by wallet identity."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any, AsyncIterator

from ..config import settings
from ..logging import get_logger, wallet_context
from ..models import WalletIdentity
from .supervisor import ZingoProcess


class ProcessPool:
    """Keep at most one live :class:`ZingoProcess` per :class:`WalletIdentity`.

    Spawning and eviction for the same identity are serialised by a
    per-identity lock, so two requests racing on a cold wallet share a single
    spawn. Processes that exit on their own deregister themselves and are
    never handed out again. Failed spawns are not retried here.
    """

    def __init__(
        self,
        *,
        executable: str | None = None,
        shutdown_timeout: float | None = None,
        stderr_tail_lines: int | None = None,
    ) -> None:
        self.executable = executable or settings.zingo_cli
        self._process_options: dict[str, Any] = {
            "executable": self.executable,
            "shutdown_timeout": shutdown_timeout,
            "stderr_tail_lines": stderr_tail_lines,
        }
        self._handles: dict[WalletIdentity, ZingoProcess] = {}
        self._locks: dict[WalletIdentity, asyncio.Lock] = {}
        self._lock_users: dict[WalletIdentity, int] = {}
        self._logger = get_logger(__name__)

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, identity: object) -> bool:
        return identity in self._handles

    def get(self, identity: WalletIdentity) -> ZingoProcess | None:
        """Return the live handle for *identity* without spawning."""

        handle = self._handles.get(identity)
        if handle is None or handle.exited:
            return None
        return handle

    async def acquire(self, identity: WalletIdentity) -> ZingoProcess:
        """Return the warm process for *identity*, spawning it when needed."""

        handle = self.get(identity)
        if handle is not None:
            return handle

        async with self._locked(identity):
            handle = self.get(identity)
            if handle is not None:
                return handle
            stale = self._handles.pop(identity, None)
            if stale is not None:
                await stale.destroy()

            with wallet_context(**identity.as_dict()):
                handle = await ZingoProcess.spawn(identity, **self._process_options)
                self._handles[identity] = handle
                handle.add_exit_listener(self._forget)
                self._logger.info("zingo.pool.registered", pid=handle.pid, size=len(self))
            return handle

    async def evict(self, identity: WalletIdentity) -> bool:
        """Destroy and forget the process for *identity*.

        Must run before the wallet's data directory is removed so no process
        keeps files open inside it. Returns whether a process was registered.
        """

        async with self._locked(identity):
            handle = self._handles.pop(identity, None)
            if handle is None:
                return False
            with wallet_context(**identity.as_dict()):
                self._logger.info("zingo.pool.evicted", pid=handle.pid)
                await handle.destroy()
            return True

    async def close(self) -> None:
        """Destroy every registered process."""

        handles = list(self._handles.values())
        self._handles.clear()
        if handles:
            await asyncio.gather(*(handle.destroy() for handle in handles))
        self._logger.info("zingo.pool.closed", destroyed=len(handles))

    def snapshot(self) -> list[dict[str, Any]]:
        return [handle.snapshot() for handle in self._handles.values()]

    @contextlib.asynccontextmanager
    async def _locked(self, identity: WalletIdentity) -> AsyncIterator[None]:
        """Hold the identity lock, dropping it once nobody holds or awaits it."""

        lock = self._locks.setdefault(identity, asyncio.Lock())
        self._lock_users[identity] = self._lock_users.get(identity, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[identity] -= 1
            if not self._lock_users[identity]:
                del self._lock_users[identity]
                del self._locks[identity]

    def _forget(self, handle: ZingoProcess) -> None:
        if self._handles.get(handle.identity) is handle:
            del self._handles[handle.identity]
            self._logger.warning(
                "zingo.pool.deregistered",
                return_code=handle.return_code,
                **handle.identity.as_dict(),
            )


__all__ = ["ProcessPool"]
