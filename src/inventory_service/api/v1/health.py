"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Any

import redis.asyncio as aioredis
import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inventory_service import __version__
from inventory_service.config import get_settings
from inventory_service.infrastructure.database.connection import get_session_factory

logger = structlog.get_logger()

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str
    timestamp: str
    dependencies: dict[str, Any]


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict[str, bool]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns the service status and version information.
    This endpoint is used by load balancers and orchestrators
    to determine if the service is running.
    """
    settings = get_settings()

    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc).isoformat(),
        dependencies={
            "postgres": "configured",
            "redis": "configured",
            "inventory_provider": settings.provider_api_base_url,
        },
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Verifies that the database and the Celery broker are reachable.
    This endpoint is used by Kubernetes readiness probes.
    """
    checks: dict[str, bool] = {}

    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        checks["postgres"] = True
    except Exception as e:
        logger.warning("Database readiness check failed", error=str(e))
        checks["postgres"] = False

    client = aioredis.from_url(get_settings().redis_url, socket_connect_timeout=2)
    try:
        checks["redis"] = bool(await client.ping())
    except Exception as e:
        logger.warning("Redis readiness check failed", error=str(e))
        checks["redis"] = False
    finally:
        await client.aclose()

    return ReadinessResponse(
        ready=all(checks.values()),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Liveness check endpoint.

    Simple endpoint that returns 200 if the service is running.
    This endpoint is used by Kubernetes liveness probes.
    """
    return {"status": "alive"}
