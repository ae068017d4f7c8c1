"""
Health check endpoints.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, status

from filescrud.core.config import settings
from filescrud.schemas.response import HealthCheckResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """
    Basic health check endpoint.

    Returns:
        Basic health status
    """
    return HealthCheckResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=settings.APP_VERSION,
        service=settings.APP_NAME,
        database_backend=settings.DATABASE_BACKEND
    )


@router.get("/live", status_code=status.HTTP_204_NO_CONTENT)
async def liveness_check() -> None:
    """Liveness check; 204 jika service hidup."""
    return None
