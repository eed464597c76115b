"""Value objects shared by the process and wallet layers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field

from .config import settings


@dataclass(frozen=True, slots=True)
class WalletIdentity:
    """Identifies one zingo-cli wallet session.

    Two identities are the same session only when chain, server and data
    directory all match exactly; the triple is the process pool key and the
    location of the wallet's on-disk state.
    """

    chain: str
    server_url: str
    data_dir: str

    @classmethod
    def build(
        cls,
        data_dir: str | Path,
        *,
        chain: str | None = None,
        server_url: str | None = None,
    ) -> "WalletIdentity":
        """Create an identity filling chain and server from the settings."""

        return cls(
            chain=chain or settings.default_chain,
            server_url=server_url or settings.default_server_url,
            data_dir=str(data_dir),
        )

    def cli_args(self) -> list[str]:
        """Return the zingo-cli arguments selecting this wallet."""

        return [
            "--chain",
            self.chain,
            "--server",
            self.server_url,
            "--data-dir",
            self.data_dir,
        ]

    def as_dict(self) -> dict[str, str]:
        return {
            "chain": self.chain,
            "server_url": self.server_url,
            "data_dir": self.data_dir,
        }


class Recipient(BaseModel):
    """One entry of a ``quicksend`` payment list, amounts in zatoshis."""

    address: str = Field(min_length=1)
    amount: float = Field(ge=0)
    memo: str | None = None

    def to_payload(self, default_memo: str | None = None) -> dict[str, object]:
        return {
            "address": self.address,
            "amount": math.ceil(self.amount),
            "memo": self.memo or default_memo or settings.default_memo,
        }


__all__ = ["Recipient", "WalletIdentity"]
