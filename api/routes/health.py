"""
Health check endpoints.

Used for monitoring and load balancer health checks.
"""
from datetime import datetime, timezone
import logging
import platform

from fastapi import APIRouter, Depends
from sqlalchemy import text

from api.dependencies import get_session_factory


logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns system health status.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "grumo-fanout",
        "version": "1.0.0",
        "python_version": platform.python_version(),
    }


@router.get("/health/ready")
async def readiness_check(session_factory=Depends(get_session_factory)):
    """
    Readiness check endpoint.

    Ready when the database answers.
    """
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        logger.warning(f"Database not reachable: {e}")
        database = "unavailable"

    return {
        "status": "ready" if database == "ok" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "api": "ok",
            "database": database,
        }
    }
