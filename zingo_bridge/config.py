"""Application configuration module."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised bridge settings sourced from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    environment: str = "development"
    log_level: str = "INFO"

    # zingo-cli executable
    zingo_cli: str = "/usr/local/bin/zingo-cli"

    # Wallet identity defaults
    default_chain: str = "mainnet"
    default_server_url: str = "http://127.0.0.1:8137"
    wallets_root: str = "wallets"

    # Pooled sessions
    command_timeout: float = 10.0
    poll_interval: float = 0.5
    stale_grace: float = 2.0
    shutdown_timeout: float = 5.0
    stderr_tail_lines: int = 50

    # One-shot invocations
    oneshot_timeout: float = 120.0
    default_memo: str = "Sent from the ZEC bounty app!"
    noise_prefixes: tuple[str, ...] = ("Launching", "Save", "Zingo")

    # Lightwalletd probe
    probe_timeout: float = 5.0


settings = Settings()
