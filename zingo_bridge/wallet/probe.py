"""Connectivity check against the wallet's indexer endpoint."""

from __future__ import annotations

from typing import Any

import httpx

from ..config import settings
from ..logging import get_logger
from ..models import WalletIdentity

logger = get_logger(__name__)


class ServerProbe:
    """Ask the server behind a wallet identity for ``getblockchaininfo``."""

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=settings.probe_timeout if timeout is None else timeout
        )

    async def aclose(self) -> None:
        """Release underlying HTTP resources if we created the client."""

        if self._owns_client:
            await self._client.aclose()

    async def check(self, identity: WalletIdentity) -> dict[str, Any]:
        """Return ``{"connected": True, ...}`` or the connection error."""

        payload = {
            "jsonrpc": "2.0",
            "id": "test",
            "method": "getblockchaininfo",
            "params": [],
        }
        try:
            response = await self._client.post(
                identity.server_url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("wallet.probe.failed", server_url=identity.server_url, error=str(exc))
            return {"connected": False, "error": str(exc)}

        result = body.get("result") if isinstance(body, dict) else None
        result = result if isinstance(result, dict) else {}
        logger.info("wallet.probe.connected", server_url=identity.server_url)
        return {
            "connected": True,
            "chain": result.get("chain") or "unknown",
            "blocks": result.get("blocks") or 0,
        }


__all__ = ["ServerProbe"]
