from fastapi import APIRouter
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
from punchclock.db import get_store
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint for production monitoring
    """
    health_status = {
        "status": "healthy",
        "timestamp": _now(),
        "version": "1.0.0",
        "checks": {}
    }

    # Store connectivity check
    try:
        await get_store().ping()
        health_status["checks"]["store"] = {"status": "healthy"}
    except Exception as e:
        logger.warning("Store health check failed: %s", e)
        health_status["checks"]["store"] = {"status": "unhealthy"}
        health_status["status"] = "degraded"

    return health_status  # 200 even when degraded


@router.get("/health/ready")
async def readiness_check():
    """
    Kubernetes readiness probe endpoint
    """
    try:
        await get_store().ping()
    except Exception as e:
        logger.warning("Readiness check failed: %s", e)
        return JSONResponse(status_code=503, content={"status": "not_ready", "timestamp": _now()})

    return {"status": "ready", "timestamp": _now()}


@router.get("/health/live")
async def liveness_check():
    """
    Kubernetes liveness probe endpoint
    """
    return {"status": "alive", "timestamp": _now()}
