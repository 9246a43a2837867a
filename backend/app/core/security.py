"""
Admin access control.
Store-mutating routes require the admin API key; listing stays open.
"""

from typing import Optional
import logging
import secrets

from fastapi import Header

from app.core.config import settings
from app.core.errors import Forbidden

logger = logging.getLogger(__name__)


def require_admin_key(x_api_key: Optional[str] = Header(None, alias="X-API-Key")) -> None:
    """FastAPI dependency: reject requests without the configured admin key."""
    # compare_digest rejects non-ASCII str, so compare bytes
    supplied = (x_api_key or "").encode("utf-8")
    if not supplied or not secrets.compare_digest(supplied, settings.admin_api_key.encode("utf-8")):
        logger.warning("Rejected mutating request with missing or invalid API key")
        raise Forbidden("Invalid or missing API key")
