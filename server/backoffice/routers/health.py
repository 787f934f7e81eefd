"""Health check router."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.database import check_db_connection
from ..core.observability import SERVICE_VERSION
from ..schemas.health import HealthResponse, HealthStatus, ReadinessResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/health", tags=["health"])


@router.post("/ping", response_model=HealthResponse)
async def health_ping() -> HealthResponse:
    """Liveness probe returning the current server time."""
    return HealthResponse(
        status=HealthStatus.HEALTHY,
        timestamp=datetime.now(timezone.utc),
        version=SERVICE_VERSION,
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness() -> JSONResponse:
    """Readiness probe; answers 503 while the database is unreachable."""
    database_ok = await check_db_connection()
    if not database_ok:
        logger.warning("Readiness check failed: database unavailable")

    body = ReadinessResponse(
        status=HealthStatus.READY if database_ok else HealthStatus.DEGRADED,
        checks={"database": "ok" if database_ok else "unavailable"},
    )
    return JSONResponse(status_code=200 if database_ok else 503, content=body.model_dump(mode="json"))
