"""
Health Check Endpoints

Provides:
1. /health/live - Liveness probe
2. /health/ready - Readiness probe (document store reachable)
3. /health/email - Email delivery statistics
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from database.document_store import USERS

from ..dependencies import ServiceContainer, get_container

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])

# Application start time for uptime calculation
_start_time = datetime.now(timezone.utc)


@router.get("/live")
async def liveness():
    return {"status": "alive"}


@router.get("/ready")
async def readiness(container: ServiceContainer = Depends(get_container)):
    """Ready when the document store answers a read."""
    try:
        await container.store.get(USERS, "__health__")
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "not_ready", "store": "down"})

    uptime = (datetime.now(timezone.utc) - _start_time).total_seconds()
    return {
        "status": "ready",
        "store": type(container.store).__name__,
        "email_provider": container.email_triggers.provider.provider_name,
        "uptime_seconds": round(uptime, 1),
    }


@router.get("/email")
async def email_stats(container: ServiceContainer = Depends(get_container)):
    return container.email_triggers.get_notification_stats()
