"""Application entry point for the zingo-bridge service."""
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from .api.pool import router as pool_router
from .config import settings
from .logging import configure_logging, get_logger
from .process import CommandDispatcher, OneShotRunner, ProcessPool
from .wallet import ServerProbe, WalletDirectories, WalletService

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the process pool for the lifetime of the application."""

    pool = ProcessPool()
    probe = ServerProbe()
    app.state.pool = pool
    app.state.directories = WalletDirectories(pool)
    app.state.wallets = WalletService(CommandDispatcher(pool), OneShotRunner(), probe=probe)
    logger.info("app.startup", environment=settings.environment, zingo_cli=settings.zingo_cli)
    try:
        yield
    finally:
        await pool.close()
        await probe.aclose()
        logger.info("app.shutdown", environment=settings.environment)


app = FastAPI(title="zingo-bridge", version="0.1.0", lifespan=lifespan)

router = APIRouter(tags=["health"])


@router.get("/health", summary="Infra healthcheck")
def healthcheck() -> dict[str, str]:
    """Simple health endpoint for infrastructure smoke tests."""

    return {"status": "ok", "environment": settings.environment}


app.include_router(router)
app.include_router(pool_router)
