# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.dependencies import DatabaseDep

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Liveness payload. Fixed, so monitors can compare it verbatim."""
    msg: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    database: str
    timestamp: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns the same payload every time, whatever the auth state.
    """
    return HealthResponse(msg="Success from health")


@router.get("/health/ready", response_model=ReadinessResponse)
def readiness_check(database: DatabaseDep):
    """
    Readiness check endpoint.

    Pings the store; reports "degraded" instead of failing when it's down.
    """
    try:
        database.ping()
        database_status = "healthy"
    except Exception as e:
        logger.warning(f"Readiness ping failed: {e}")
        database_status = f"unhealthy: {str(e)[:50]}"

    return ReadinessResponse(
        status="ready" if database_status == "healthy" else "degraded",
        database=database_status,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
