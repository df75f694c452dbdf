"""
Health check endpoints
"""

from fastapi import APIRouter, Depends
import structlog

from devicewatch.api.dependencies import get_database
from devicewatch.database.connection import Database

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check"""
    return {"status": "ok"}


@router.get("/health/detailed")
def detailed_health_check(database: Database = Depends(get_database)):
    """Detailed health check with database connectivity"""
    db_status = "connected" if database.ping() else "disconnected"
    if db_status != "connected":
        logger.warning("Database health check failed")

    return {
        "status": "healthy" if db_status == "connected" else "unhealthy",
        "database": db_status,
        "service": "DeviceWatch API",
    }
