"""Health, readiness and service information endpoints."""

import logging
from datetime import datetime

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.dependencies import DatabaseSession
from ..core.observability import SERVICE_NAME, SERVICE_VERSION
from ..schemas.health import HealthResponse, HealthStatus, ReadinessResponse
from ..workers.manager import worker_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Health Check",
    description="Check if the service is healthy and responsive",
    response_model=dict,
)
async def health_check():
    """
    Health check endpoint that returns service status.

    Returns:
        dict: Health status information
    """
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "environment": settings.environment,
        "debug": settings.debug,
    }


@router.get(
    "/ready",
    summary="Readiness Check",
    description="Check if the service can reach its database",
    response_model=ReadinessResponse,
)
async def readiness_check(db: AsyncSession = DatabaseSession) -> JSONResponse:
    """Readiness probe: 200 when the database answers, 503 otherwise."""
    try:
        await db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.warning("Readiness check failed - database unreachable", extra={"error": str(e)})
        database = "unavailable"

    ready = database == "ok"
    response = ReadinessResponse(
        status="ready" if ready else "not_ready",
        service=SERVICE_NAME,
        checks={"database": database},
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response.model_dump(),
    )


@router.get(
    "/info",
    status_code=status.HTTP_200_OK,
    summary="Service Information",
    description="Get detailed information about the service",
    response_model=dict,
)
async def service_info():
    """
    Service information endpoint.

    Returns:
        dict: Detailed service information
    """
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "description": "Booking backend for a boat-tour operator",
        "environment": settings.environment,
        "debug": settings.debug,
        "features": {
            "authentication": True,
            "seat_ledger": True,
            "cancellation_window_hours": settings.cancellation_window_hours,
            "tracing": settings.otlp_endpoint is not None,
            "problem_details": True,
        },
        "workers": worker_manager.get_worker_status(),
        "endpoints": {
            "health": "/health",
            "readiness": "/ready",
            "info": "/info",
            "metrics": "/metrics",
            "docs": "/docs" if settings.debug else None,
        },
    }


@router.post("/v1/health/ping", response_model=HealthResponse)
async def health_ping() -> JSONResponse:
    """
    Health check endpoint.

    Returns current service status and timestamp.
    """
    response_data = HealthResponse(
        status=HealthStatus.HEALTHY,
        timestamp=datetime.utcnow(),
        version=SERVICE_VERSION
    )

    logger.debug(
        "Health check requested",
        extra={
            "status": response_data.status.value,
            "timestamp": response_data.timestamp.isoformat()
        }
    )

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )
