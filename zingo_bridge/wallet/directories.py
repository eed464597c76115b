"""On-disk wallet directories and the identities that point at them."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from ..config import settings
from ..logging import get_logger
from ..models import WalletIdentity
from ..process.pool import ProcessPool

logger = get_logger(__name__)


def _component(value: str, label: str) -> str:
    text = (value or "").strip()
    if not text or text in {".", ".."} or "/" in text or "\\" in text:
        raise ValueError(f"Invalid {label}: {value!r}")
    return text


class WalletDirectories:
    """Map ``owner/account/chain`` references to wallet identities.

    Wallet state lives under ``<root>/<owner>/<account>/<chain>``. A directory
    is owned by its pooled process, so :meth:`remove` evicts that process
    before deleting anything.
    """

    def __init__(
        self,
        pool: ProcessPool,
        *,
        root: str | Path | None = None,
        chain: str | None = None,
        server_url: str | None = None,
    ) -> None:
        self.pool = pool
        self.root = Path(root or settings.wallets_root).expanduser().resolve()
        self.chain = chain or settings.default_chain
        self.server_url = server_url or settings.default_server_url

    def path_for(self, owner_id: str, account_name: str = "Main", chain: str | None = None) -> Path:
        return (
            self.root
            / _component(owner_id, "owner id")
            / _component(account_name, "account name")
            / _component(chain or self.chain, "chain")
        )

    def resolve(
        self,
        owner_id: str,
        account_name: str = "Main",
        *,
        chain: str | None = None,
        server_url: str | None = None,
    ) -> WalletIdentity:
        """Return the identity for an account without touching the disk."""

        resolved_chain = chain or self.chain
        return WalletIdentity(
            chain=resolved_chain,
            server_url=server_url or self.server_url,
            data_dir=str(self.path_for(owner_id, account_name, resolved_chain)),
        )

    def ensure(
        self,
        owner_id: str,
        account_name: str = "Main",
        *,
        chain: str | None = None,
        server_url: str | None = None,
    ) -> WalletIdentity:
        """Create the account directory if needed and return its identity."""

        identity = self.resolve(owner_id, account_name, chain=chain, server_url=server_url)
        Path(identity.data_dir).mkdir(parents=True, exist_ok=True)
        logger.info("wallet.directory.ensured", data_dir=identity.data_dir)
        return identity

    async def remove(self, identity: WalletIdentity) -> bool:
        """Evict the wallet's process, then delete its directory tree.

        Returns whether a directory was deleted.
        """

        data_dir = Path(identity.data_dir).resolve()
        if self.root not in data_dir.parents:
            raise ValueError(f"{data_dir} is outside the wallets root {self.root}")

        await self.pool.evict(identity)
        if not data_dir.exists():
            return False
        await asyncio.to_thread(shutil.rmtree, data_dir)
        logger.info("wallet.directory.removed", data_dir=str(data_dir))
        return True


__all__ = ["WalletDirectories"]
