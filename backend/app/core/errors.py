"""
Error taxonomy for content operations.

Every error carries a machine-readable ``code`` and the HTTP status the API
layer renders it with. Validation errors are raised before any store call;
store errors are raised by the repositories after classification by the
connectivity guard.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional


class ContentError(Exception):
    """Base class for all content/store errors surfaced to API callers."""

    code = "content_error"
    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Response body: {error, message, timestamp} plus details when present."""
        data: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details is not None:
            data["details"] = self.details
        data["timestamp"] = datetime.utcnow().isoformat()
        return data


class ValidationFailed(ContentError):
    """A required field is missing or a value is malformed."""

    code = "validation_failed"
    status_code = 422

    @classmethod
    def from_pydantic(cls, exc, prefix: str = "Invalid submission") -> "ValidationFailed":
        fields: List[str] = []
        for err in exc.errors():
            loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
            fields.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
        return cls(f"{prefix}: {'; '.join(fields)}", details=fields)


class NotFound(ContentError):
    code = "not_found"
    status_code = 404


class IndexOutOfRange(ContentError):
    """Category-array edit/delete addressed an index outside the stored list."""

    code = "index_out_of_range"
    status_code = 404


class StaleRecord(IndexOutOfRange):
    """The element at the index no longer matches the caller's etag."""

    code = "stale_record"
    status_code = 409


class NetworkUnavailable(ContentError):
    code = "network_unavailable"
    status_code = 503


class StoreUnavailable(ContentError):
    """The store could neither be read nor written."""

    code = "store_unavailable"
    status_code = 503


class WriteFailed(ContentError):
    """The store rejected a write for a reason other than connectivity."""

    code = "write_failed"
    status_code = 502


class Timeout(ContentError):
    """An operation exceeded its caller-imposed deadline."""

    code = "timeout"
    status_code = 504


class Forbidden(ContentError):
    """Missing or wrong admin API key."""

    code = "forbidden"
    status_code = 403


class RateLimited(ContentError):
    code = "rate_limited"
    status_code = 429


class InternalError(ContentError):
    """Anything not covered above; rendered without internals unless debug is on."""

    code = "internal_error"
    status_code = 500
