"""Health & Readiness Checks: liveness and readiness endpoints.

Invariants:
    - GET /api/health/ always returns 200 if the process is up (liveness)
    - GET /api/health/ready returns 503 if Firestore is unreachable or uninitialized
"""

import logging

from fastapi import APIRouter, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

import diaspora_connect.infrastructure.firestore as firestore_module

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness check. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "diaspora-connect-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check():
    """Readiness check, including Firestore connectivity."""
    manager = firestore_module.firestore_manager
    db_ok = await run_in_threadpool(manager.health_check) if manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "firestore_unavailable",
            },
        )
    return {"status": "ready", "checks": {"firestore": "healthy"}}
