"""Connectivity guard: advisory network enable, error classification, deadlines."""

import threading
import time

import pytest

from app.core.errors import NetworkUnavailable, StoreUnavailable, Timeout, WriteFailed
from app.store.base import StoreOfflineError
from app.store.guard import (
    ConnectivityGuard,
    call_with_timeout,
    classify_read_error,
    classify_write_error,
)
from app.store.sql_store import SQLDocumentStore


class BrokenEnableStore(SQLDocumentStore):
    def enable_network(self):
        raise RuntimeError("Firestore client already started")


class SlowEnableStore(SQLDocumentStore):
    def enable_network(self):
        time.sleep(1.0)


def test_enable_failure_is_logged_and_write_proceeds(store, caplog):
    broken = BrokenEnableStore(store.engine, create_schema=False)
    guard = ConnectivityGuard(broken)

    with caplog.at_level("WARNING", logger="app.store.guard"):
        guard.write(broken.set_document, "settings", "site", {"siteName": "Safar Air"})

    assert "error enabling" in caplog.text
    assert store.get_document("settings", "site") == {"siteName": "Safar Air"}


def test_enable_timeout_is_swallowed(store):
    slow = SlowEnableStore(store.engine, create_schema=False)
    guard = ConnectivityGuard(slow, enable_timeout=0.05)

    assert guard.ensure_network() is False
    guard.write(slow.set_document, "settings", "site", {"sitePhone": "1"})
    assert store.get_document("settings", "site") == {"sitePhone": "1"}


def test_write_re_enables_offline_store(store, guard):
    store.disable_network()

    guard.write(store.set_document, "settings", "site", {"siteName": "Back Online"})

    assert store.get_document("settings", "site") == {"siteName": "Back Online"}


def test_offline_read_is_network_unavailable(store, guard):
    store.disable_network()

    with pytest.raises(NetworkUnavailable):
        guard.read(store.get_document, "settings", "site")


def test_write_timeout_raises_timeout(store):
    guard = ConnectivityGuard(store, write_timeout=0.05)

    with pytest.raises(Timeout):
        guard.write(time.sleep, 1.0)


def test_write_finishing_after_deadline_is_logged(caplog):
    release = threading.Event()

    def slow_save():
        release.wait(2.0)
        return "saved"

    with caplog.at_level("WARNING", logger="app.store.guard"):
        with pytest.raises(Timeout):
            call_with_timeout(slow_save, 0.05)
        release.set()
        deadline = time.monotonic() + 2.0
        while "slow_save completed after" not in caplog.text and time.monotonic() < deadline:
            time.sleep(0.01)

    assert "slow_save completed after its 0.05s deadline" in caplog.text


def test_call_with_timeout_runs_inline_without_deadline():
    assert call_with_timeout(lambda a, b: a + b, None, 2, 3) == 5


def test_call_with_timeout_returns_result_within_deadline():
    assert call_with_timeout(lambda: "ok", 1.0) == "ok"


@pytest.mark.parametrize("exc", [
    StoreOfflineError("Failed to get document because the client is offline."),
    ConnectionError("reset by peer"),
    RuntimeError("503 Service Unavailable"),
    OSError("Connection refused"),
])
def test_connectivity_errors_classify_as_network_unavailable(exc):
    write_error = classify_write_error(exc)
    assert isinstance(write_error, NetworkUnavailable)
    assert write_error.message == "Network error: Please check your internet connection and try again"
    assert isinstance(classify_read_error(exc), NetworkUnavailable)


def test_other_errors_classify_by_direction():
    exc = RuntimeError("Missing or insufficient permissions")
    assert isinstance(classify_write_error(exc), WriteFailed)
    assert isinstance(classify_read_error(exc), StoreUnavailable)


def test_classified_errors_pass_through_unchanged():
    original = Timeout("set_document timed out after 5s")
    assert classify_write_error(original) is original
    assert classify_read_error(original) is original
