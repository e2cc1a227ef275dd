"""Health check endpoints for load balancers and monitoring."""

from datetime import datetime

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from formwizard import __version__
from formwizard.config import settings
from formwizard.database import engine

router = APIRouter(tags=["health"])


@router.get("/")
async def root():
    return {"status": "formwizard API is running", "version": __version__}


@router.get("/health")
async def health_check():
    """Lightweight health check (no DB check)."""
    return {
        "status": "ok",
        "service": "formwizard",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check():
    """Readiness check: 200 only when the database answers."""
    checks = {"service": "ok", "database": "unknown"}
    healthy = True

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {str(e)[:100]}"
        healthy = False

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "service": "formwizard",
            "checks": checks,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )
