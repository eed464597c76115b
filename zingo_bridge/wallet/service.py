"""Typed wallet operations built on the pooled and one-shot paths."""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from ..config import settings
from ..logging import get_logger
from ..models import Recipient, WalletIdentity
from ..parsers.blocks import parse_blocks
from ..parsers.flat import parse_flat
from ..parsers.objects import parse_object, parse_objects
from ..parsers.results import ParseResult, ParseStatus
from ..process.dispatcher import CommandDispatcher
from ..process.oneshot import OneShotRunner
from .probe import ServerProbe

_SPENDABLE_BALANCE_KEYS = {
    "testnet": "confirmed_orchard_balance",
    "mainnet": "confirmed_sapling_balance",
}


class WalletService:
    """High level zingo-cli operations returning mappings or lists of mappings.

    Commands that benefit from a warm, synced wallet (``sync status`` and
    arbitrary REPL commands) go through the pooled dispatcher; the rest use
    a one-shot invocation, as the CLI prints their results on exit.
    """

    def __init__(
        self,
        dispatcher: CommandDispatcher,
        runner: OneShotRunner,
        *,
        probe: ServerProbe | None = None,
        default_memo: str | None = None,
        noise_prefixes: Iterable[str] | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.runner = runner
        self.probe = probe
        self.default_memo = default_memo or settings.default_memo
        self.noise_prefixes = tuple(
            settings.noise_prefixes if noise_prefixes is None else noise_prefixes
        )
        self._logger = get_logger(__name__)

    async def balance(self, identity: WalletIdentity) -> dict[str, Any]:
        result = await self.runner.invoke(
            identity, "balance", parser=lambda text: parse_flat(text, self.noise_prefixes)
        )
        return self._unwrap("balance", result)

    async def spendable_balance(self, identity: WalletIdentity) -> int | float | None:
        """Return the confirmed balance of the pool used on the wallet's chain."""

        key = _SPENDABLE_BALANCE_KEYS.get(identity.chain)
        if key is None:
            return None
        return (await self.balance(identity)).get(key)

    async def transactions(self, identity: WalletIdentity) -> Any:
        result = await self.runner.invoke(identity, "transactions", parser=parse_blocks)
        return self._unwrap("transactions", result)

    async def addresses(self, identity: WalletIdentity) -> Any:
        result = await self.runner.invoke(identity, "addresses", parser=parse_objects)
        return self._unwrap("addresses", result)

    async def parse_address(self, identity: WalletIdentity, address: str) -> Any:
        if not address or not address.strip():
            raise ValueError("No address provided")
        result = await self.runner.invoke(
            identity, "parse_address", address.strip(), parser=parse_objects
        )
        return self._unwrap("parse_address", result)

    async def quicksend(
        self,
        identity: WalletIdentity,
        recipients: Iterable[Recipient | Mapping[str, Any]],
    ) -> Any:
        """Send to every recipient in one ``quicksend`` call.

        The payment list travels as a single JSON argument with amounts
        rounded up to whole zatoshis and a default memo filled in.
        """

        payments = [
            (item if isinstance(item, Recipient) else Recipient.model_validate(item)).to_payload(
                self.default_memo
            )
            for item in recipients
        ]
        if not payments:
            raise ValueError("At least one recipient is required")
        self._logger.info(
            "wallet.quicksend.start",
            recipients=len(payments),
            total=sum(payment["amount"] for payment in payments),
        )
        result = await self.runner.invoke(
            identity, "quicksend", json.dumps(payments), parser=parse_objects
        )
        return self._unwrap("quicksend", result)

    async def sync_status(self, identity: WalletIdentity, *, timeout: float | None = None) -> Any:
        result = await self.dispatcher.send(identity, "sync status", timeout=timeout)
        return self._unwrap("sync status", result)

    async def command(
        self, identity: WalletIdentity, command: str, *, timeout: float | None = None
    ) -> Any:
        """Run any REPL command on the wallet's warm process."""

        result = await self.dispatcher.send(identity, command, parser=parse_object, timeout=timeout)
        return self._unwrap(command, result)

    async def probe_server(self, identity: WalletIdentity) -> dict[str, Any]:
        if self.probe is None:
            self.probe = ServerProbe()
        return await self.probe.check(identity)

    def _unwrap(self, command: str, result: ParseResult) -> Any:
        if result.status is ParseStatus.PARTIAL:
            self._logger.warning(
                "wallet.output.partial", command=command, skipped=result.skipped
            )
        return result.unwrap()


__all__ = ["WalletService"]
