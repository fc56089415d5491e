"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from fintrack.core.dependencies import get_firestore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_check(request: Request):
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    settings = request.app.state.settings
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def _database(request: Request):
    # Resolve lazily so a missing Firestore config becomes a 503 below
    try:
        return get_firestore(request)
    except RuntimeError as e:
        logger.error(f"❌ Firestore unavailable: {e}")
        raise HTTPException(status_code=503, detail="Database connection failed")


@router.get("/db")
def database_health(db=Depends(_database)):
    """
    Database connectivity check.
    Lists top-level collections as a cheap round trip.
    """
    try:
        collections = list(db.collections())
    except Exception as e:
        logger.error(f"❌ Firestore health check failed: {e}")
        raise HTTPException(status_code=503, detail="Database connection failed")

    return {
        "status": "healthy",
        "database": "firestore",
        "connected": True,
        "collections_count": len(collections),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
