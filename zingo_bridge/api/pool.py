"""Diagnostics for the warm zingo-cli process pool."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

router = APIRouter(prefix="/pool", tags=["pool"])


@router.get("/", summary="Warm zingo-cli processes")
def list_processes(request: Request) -> dict[str, Any]:
    """Return one entry per pooled process with its state and stderr tail."""

    pool = request.app.state.pool
    items = pool.snapshot()
    return {"total": len(items), "items": items}


__all__ = ["router"]
