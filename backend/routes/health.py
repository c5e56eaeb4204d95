"""
Health check endpoint.
"""
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from config import settings
from services import registry_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Health check: reports whether the registry is up and its gate state."""
    try:
        registry = registry_service.get_registry()
        return {
            "status": "healthy",
            "environment": settings.environment,
            "gateState": registry.gate_state().value,
            "nextId": registry.next_id,
            "pendingEvents": registry_service.pending_event_count(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "error": str(e),
            },
        )
