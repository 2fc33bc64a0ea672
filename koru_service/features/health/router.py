"""Health check endpoints.

- /health/live: the process is up
- /health/ready: the store answers reads
"""

from __future__ import annotations

from datetime import UTC, datetime
import logging
from uuid import UUID

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from koru_service.app.dependencies import ServicesDep  # noqa: TC001
from koru_service.core.settings import get_app_settings
from koru_service.core.store.exceptions import RepositoryError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

# Never assigned to a real user
_PROBE_ID = UUID(int=0)


class LivenessResponse(BaseModel):
    alive: bool
    timestamp: datetime
    service: str


class ReadinessResponse(BaseModel):
    ready: bool
    checks: dict[str, bool]
    timestamp: datetime


@router.get("/live", response_model=LivenessResponse, summary="Liveness probe")
async def liveness_check() -> LivenessResponse:
    return LivenessResponse(
        alive=True,
        timestamp=datetime.now(UTC),
        service=get_app_settings().service_name,
    )


@router.get("/ready", response_model=ReadinessResponse, summary="Readiness probe")
async def readiness_check(response: Response, services: ServicesDep) -> ReadinessResponse:
    """Return 503 while the store cannot serve reads."""
    try:
        await services.store.users.find(_PROBE_ID)
        store_ok = True
    except RepositoryError:
        logger.warning("Store readiness check failed", exc_info=True)
        store_ok = False

    if not store_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(ready=store_ok, checks={"store": store_ok}, timestamp=datetime.now(UTC))
