"""
Health check endpoints.
Used for monitoring and deployment readiness checks.
"""

from fastapi import APIRouter
from infraction_reporter.core.settings import settings
from datetime import datetime, timezone


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "geocoding_provider": settings.GEOCODING_PROVIDER,
        "plate_recognition_provider": settings.PLATE_RECOGNITION_PROVIDER,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
