"""
Connectivity guard.

Before every write the repositories ask the guard to (re)enable the store's
network path. The attempt is advisory: if it fails or times out the failure
is logged and the write proceeds anyway. The write's own failure is then
classified into ``NetworkUnavailable`` or ``WriteFailed``.
"""

from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Any, Callable, Optional
import logging

from app.core.errors import ContentError, NetworkUnavailable, StoreUnavailable, Timeout, WriteFailed
from app.store.base import ContentStore

logger = logging.getLogger(__name__)

# Substrings that mark an error as a connectivity problem
OFFLINE_MARKERS = (
    "offline",
    "unavailable",
    "network",
    "connection refused",
    "connection reset",
    "could not connect",
    "unable to open database",
    "name resolution",
)

_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="store-deadline")


def call_with_timeout(fn: Callable[..., Any], timeout: Optional[float], *args: Any, **kwargs: Any) -> Any:
    """Run ``fn`` and raise ``Timeout`` if it has not returned after ``timeout`` seconds.

    With ``timeout=None`` the call runs inline with the client's own defaults.
    A call that has not started yet is cancelled. One already running cannot
    be stopped: it may still complete after ``Timeout`` was raised, and that
    late outcome is logged.
    """
    if timeout is None:
        return fn(*args, **kwargs)
    name = getattr(fn, "__name__", "operation")
    future = _executor.submit(fn, *args, **kwargs)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout:
        if not future.cancel():
            future.add_done_callback(lambda f: _log_late_outcome(name, timeout, f))
        raise Timeout(f"{name} timed out after {timeout:g}s")


def _log_late_outcome(name: str, timeout: float, future: Future) -> None:
    error = future.exception()
    if error is None:
        logger.warning(f"{name} completed after its {timeout:g}s deadline; the reported Timeout is stale")
    else:
        logger.warning(f"{name} failed after its {timeout:g}s deadline: {error}")


def is_offline_error(exc: BaseException) -> bool:
    if isinstance(exc, (ConnectionError, NetworkUnavailable)):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in OFFLINE_MARKERS)


def classify_write_error(exc: BaseException) -> ContentError:
    """Map a raw store exception from a write to the error taxonomy."""
    if isinstance(exc, ContentError):
        return exc
    if is_offline_error(exc):
        return NetworkUnavailable(
            "Network error: Please check your internet connection and try again",
            details=str(exc),
        )
    return WriteFailed(f"Store rejected the write: {exc}", details=str(exc))


def classify_read_error(exc: BaseException) -> ContentError:
    if isinstance(exc, ContentError):
        return exc
    if is_offline_error(exc):
        return NetworkUnavailable(
            "Network error: Please check your internet connection and try again",
            details=str(exc),
        )
    return StoreUnavailable(f"Could not read from the content store: {exc}", details=str(exc))


class ConnectivityGuard:
    """Wraps store reads and writes for one process-wide store client."""

    def __init__(
        self,
        store: ContentStore,
        enable_timeout: Optional[float] = 10.0,
        write_timeout: Optional[float] = None,
    ):
        self.store = store
        self.enable_timeout = enable_timeout
        self.write_timeout = write_timeout

    def ensure_network(self) -> bool:
        """Best-effort enable of the store's network path. Never raises."""
        try:
            call_with_timeout(self.store.enable_network, self.enable_timeout)
            return True
        except Exception as e:
            logger.warning(f"Network already enabled or error enabling: {e}")
            return False

    def read(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            error = classify_read_error(e)
            logger.warning(f"Store read failed ({error.code}): {e}")
            raise error from e

    def write(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        self.ensure_network()
        try:
            return call_with_timeout(fn, self.write_timeout, *args, **kwargs)
        except Exception as e:
            error = classify_write_error(e)
            logger.error(f"Store write failed ({error.code}): {e}")
            raise error from e
