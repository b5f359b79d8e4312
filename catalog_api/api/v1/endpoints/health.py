"""
Health Check Endpoints
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog
import time

from catalog_api.core.database import check_database_health

logger = structlog.get_logger()
router = APIRouter()


@router.get("/")
async def health_check():
    """Database connectivity check. Public, no credential required."""
    db_healthy = await check_database_health()
    body = {
        "status": "healthy" if db_healthy else "unhealthy",
        "service": "catalog-api",
        "version": "1.0.0",
        "timestamp": time.time(),
        "database": "connected" if db_healthy else "unavailable",
    }

    if not db_healthy:
        logger.error("Health check failed", database=False)
        return JSONResponse(status_code=503, content=body)
    return body
