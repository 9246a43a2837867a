"""SQL document store: replace vs merge, batches, offline mode."""

import pytest

from app.core.config import Settings
from app.db.database import create_db_engine
from app.store.base import BatchWrite, StoreOfflineError, WriteMode
from app.store.factory import create_store
from app.store.sql_store import SQLDocumentStore


def test_replace_discards_prior_fields(store):
    store.set_document("destination-highlights", "h1", {"type": "video", "videoUrl": "https://v", "thumbnail": "https://t"})
    store.set_document("destination-highlights", "h1", {"type": "description", "title": "T"})

    assert store.get_document("destination-highlights", "h1") == {"type": "description", "title": "T"}


def test_merge_keeps_unmentioned_fields(store):
    store.set_document("settings", "site", {"siteName": "A", "siteEmail": "a@b.co"})
    store.set_document("settings", "site", {"siteName": "B"}, WriteMode.MERGE)

    assert store.get_document("settings", "site") == {"siteName": "B", "siteEmail": "a@b.co"}


def test_add_document_generates_store_keys(store):
    first = store.add_document("testimonials", {"name": "A"})
    second = store.add_document("testimonials", {"name": "B"})

    assert first != second
    assert len(first) == 20
    assert dict(store.list_documents("testimonials")) == {first: {"name": "A"}, second: {"name": "B"}}


def test_collections_are_isolated(store):
    store.set_document("packages", "curated", {"items": []})
    assert store.list_documents("testimonials") == []
    assert store.get_document("testimonials", "curated") is None


def test_delete_missing_document_is_not_an_error(store):
    store.delete_document("testimonials", "ghost")
    assert store.get_document("testimonials", "ghost") is None


def test_batch_applies_all_writes(store):
    store.commit_batch([
        BatchWrite("packages", "curated", {"items": [{"title": "A"}]}),
        BatchWrite("settings", "site", {"siteName": "X"}),
        BatchWrite("settings", "site", {"sitePhone": "1"}, WriteMode.MERGE),
    ])

    assert store.get_document("packages", "curated") == {"items": [{"title": "A"}]}
    assert store.get_document("settings", "site") == {"siteName": "X", "sitePhone": "1"}


def test_failed_batch_writes_nothing(store):
    with pytest.raises(Exception):
        store.commit_batch([
            BatchWrite("packages", "umrah", {"items": []}),
            BatchWrite("packages", "curated", {"items": [object()]}),
        ])

    assert store.get_document("packages", "umrah") is None
    assert store.get_document("packages", "curated") is None


def test_offline_mode_fails_every_operation_until_enabled(store):
    store.disable_network()

    with pytest.raises(StoreOfflineError, match="client is offline"):
        store.get_document("settings", "site")
    with pytest.raises(StoreOfflineError):
        store.set_document("settings", "site", {"siteName": "X"})

    store.enable_network()
    store.enable_network()
    store.set_document("settings", "site", {"siteName": "X"})
    assert store.ping() is True


def test_factory_builds_sql_store():
    store = create_store(Settings(store_backend="sql", database_url="sqlite://"))
    try:
        assert store.name == "sql"
        assert store.list_documents("packages") == []
    finally:
        store.close()


def test_factory_rejects_unknown_backend():
    with pytest.raises(ValueError):
        create_store(Settings(store_backend="mongo"))


def test_separate_in_memory_engines_do_not_share_data(store):
    store.set_document("settings", "site", {"siteName": "X"})
    other = SQLDocumentStore(create_db_engine("sqlite://"))
    try:
        assert other.get_document("settings", "site") is None
    finally:
        other.close()
