"""
unleash_proxy.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/isAlive`), independent of client state.
- Provide readiness probe (`/isReady`), healthy only once every Unleash client synchronized.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from unleash_proxy.api.deps import registry_from_app
from unleash_proxy.clients.registry import ClientRegistry

router = APIRouter()


@router.get("/isAlive")
async def is_alive() -> dict[str, str]:
    # Liveness: process is up and serving HTTP.
    return {"status": "ok"}


@router.get("/isReady")
async def is_ready(
    response: Response,
    registry: ClientRegistry = Depends(registry_from_app),
) -> dict[str, str]:
    if not registry.is_ready():
        response.status_code = HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not_ready"}
    return {"status": "ready"}


# --- Module Notes -----------------------------------------------------------
# Readiness stays 503 forever after a failed startup; the process exits shortly after.
