"""
Monitoring & Observability
Logging setup, per-request correlation IDs and timing of store operations.
"""

import time
from contextvars import ContextVar
from typing import Callable, Any, Dict
from functools import wraps
import logging
import logging.config
import json
from datetime import datetime

logger = logging.getLogger(__name__)

# Correlation ID of the request being served ("-" outside a request)
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

# Store operations slower than this are logged as warnings
SLOW_OPERATION_MS = 2000


# ============================================================================
# STRUCTURED LOGGING
# ============================================================================

class RequestIdFilter(logging.Filter):
    """Stamp every record with the current request's correlation ID."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line (log_format=json)."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "msg": record.getMessage(),
        }
        for attr in ("operation", "duration_ms"):
            value = getattr(record, attr, None)
            if value is not None:
                entry[attr] = value
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_logging(level: str = "INFO", log_format: str = "text") -> None:
    """Install the process-wide logging config."""
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {"()": "app.core.monitoring.RequestIdFilter"},
        },
        "formatters": {
            "text": {
                "format": "%(asctime)s %(levelname)-7s [%(request_id)s] %(name)s: %(message)s",
            },
            "json": {"()": "app.core.monitoring.JSONFormatter"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "filters": ["request_id"],
                "formatter": "json" if log_format == "json" else "text",
            },
        },
        "loggers": {
            "app": {"handlers": ["console"], "level": level},
            "uvicorn.error": {"handlers": ["console"], "level": "INFO"},
            "sqlalchemy.engine": {"handlers": ["console"], "level": "WARNING"},
            "google.cloud": {"handlers": ["console"], "level": "WARNING"},
        },
    })


# ============================================================================
# PERFORMANCE TRACKING
# ============================================================================

def track_performance(operation_name: str):
    """Decorator timing a repository operation; slow or failed calls are logged loudly."""
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            except Exception as e:
                elapsed = round((time.perf_counter() - start) * 1000, 1)
                logger.warning(
                    f"{operation_name} raised {type(e).__name__} after {elapsed}ms",
                    extra={"operation": operation_name, "duration_ms": elapsed},
                )
                raise
            finally:
                elapsed = round((time.perf_counter() - start) * 1000, 1)
                if elapsed >= SLOW_OPERATION_MS:
                    logger.warning(
                        f"Slow store operation: {operation_name} took {elapsed}ms",
                        extra={"operation": operation_name, "duration_ms": elapsed},
                    )
                else:
                    logger.debug(
                        f"{operation_name} took {elapsed}ms",
                        extra={"operation": operation_name, "duration_ms": elapsed},
                    )

        return wrapper

    return decorator
