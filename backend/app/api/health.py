"""
Health probes.
``/health/`` reports store status and document counts, ``/health/ready``
answers 503 until the store responds, ``/health/live`` only proves the
process is serving.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from datetime import datetime
import logging
import time

from app.core.config import settings
from app.core.rate_limiting import limiter, HEALTH_LIMIT
from app.store.base import HIGHLIGHTS_COLLECTION, PACKAGES_COLLECTION, TESTIMONIALS_COLLECTION, ContentStore
from app.store.factory import get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

_BOOTED_AT = time.time()

COUNTED_COLLECTIONS = (PACKAGES_COLLECTION, TESTIMONIALS_COLLECTION, HIGHLIGHTS_COLLECTION)


def _uptime() -> int:
    return int(time.time() - _BOOTED_AT)


@router.get("/")
@limiter.limit(HEALTH_LIMIT)
def health_check(request: Request, store: ContentStore = Depends(get_store)):
    """Store backend, per-collection document counts and uptime.

    An unreachable store degrades the report instead of failing it.
    """
    report = {
        "status": "healthy",
        "version": settings.app_version,
        "store": store.name,
        "documents": {},
        "uptime_seconds": _uptime(),
        "checked_at": datetime.utcnow().isoformat(),
    }
    try:
        report["documents"] = {c: len(store.list_documents(c)) for c in COUNTED_COLLECTIONS}
    except Exception as e:
        logger.warning(f"Health check could not reach the {store.name} store: {e}")
        report["status"] = "degraded"
        report["store_error"] = str(e)
    return report


@router.get("/ready")
@limiter.limit(HEALTH_LIMIT)
def readiness_check(request: Request, store: ContentStore = Depends(get_store)):
    try:
        store.ping()
    except Exception as e:
        logger.warning(f"Not ready: {store.name} store ping failed: {e}")
        return JSONResponse(status_code=503, content={"ready": False, "reason": str(e)})
    return {"ready": True}


@router.get("/live")
def liveness_check():
    return {"alive": True, "uptime_seconds": _uptime()}
