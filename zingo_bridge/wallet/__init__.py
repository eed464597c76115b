"""Wallet-level operations exposed to the rest of the application."""

from .directories import WalletDirectories
from .probe import ServerProbe
from .service import WalletService

__all__ = ["ServerProbe", "WalletDirectories", "WalletService"]
