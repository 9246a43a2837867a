"""
Per-client throttling for the admin API.
Limits come from settings; writes are throttled harder than reads.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.core.config import settings
from app.core.errors import RateLimited

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

READ_LIMIT = settings.rate_limit_read
WRITE_LIMIT = settings.rate_limit_write
HEALTH_LIMIT = settings.rate_limit_health


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 in the same {error, message, timestamp} shape as content errors."""
    client = get_remote_address(request)
    logger.warning(f"Throttled {client} on {request.method} {request.url.path} ({exc.detail})")
    error = RateLimited(f"Too many requests: limit is {exc.detail}")
    return JSONResponse(status_code=error.status_code, content=error.to_dict(), headers={"Retry-After": "60"})
