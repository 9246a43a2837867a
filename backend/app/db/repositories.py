"""
Repository pattern for content access.

- PackageCategoryRepository: one document per category whose ``items`` field
  is an ordered list of package records. Every mutation re-enables the store's
  network path, reads the whole list, changes it in memory and writes the
  whole list back (replace, never patch).
  Concurrent editors of the same category are last-write-wins.
- EntityCollectionRepository: one document per testimonial / highlight,
  addressed by its store key.
- SiteSettingsRepository: the single ``settings/site`` document.

All writes go through the ConnectivityGuard; validation happens before any
store call.
"""

from typing import Any, Dict, List, Mapping, Optional, Union
import hashlib
import json
import logging

from pydantic import BaseModel, TypeAdapter, ValidationError

from app.core.config import settings
from app.core.errors import IndexOutOfRange, NotFound, StaleRecord, StoreUnavailable, ValidationFailed
from app.core.monitoring import track_performance
from app.schemas.content import DestinationHighlight, SiteSettings, SiteSettingsUpdate, Testimonial
from app.schemas.packages import PackageCategory, build_package_record, parse_category
from app.store.base import (
    HIGHLIGHTS_COLLECTION,
    PACKAGES_COLLECTION,
    SETTINGS_COLLECTION,
    TESTIMONIALS_COLLECTION,
    BatchWrite,
    ContentStore,
    WriteMode,
)
from app.store.guard import ConnectivityGuard

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


def _canonical(value: Any) -> bytes:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str).encode("utf-8")


def list_digest(items: List[Record]) -> str:
    """Fingerprint of a whole category list."""
    return hashlib.sha1(_canonical(items)).hexdigest()


def record_etag(items: List[Record], index: int, digest: Optional[str] = None) -> str:
    """Conditional token for ``items[index]``.

    Derived from the whole list, so it goes stale as soon as any element of
    the category is added, changed, moved or removed, including an identical
    copy of the addressed record.
    """
    digest = digest or list_digest(items)
    return hashlib.sha1(f"{digest}:{index}".encode("utf-8")).hexdigest()[:16]


class PackageCategoryRepository:
    """
    Category-array access to the ``packages`` collection.
    Records have no identity beyond (category, index).
    """

    collection = PACKAGES_COLLECTION

    def __init__(self, store: ContentStore, guard: ConnectivityGuard, write_on_read_failure: bool = True):
        self.store = store
        self.guard = guard
        self.write_on_read_failure = write_on_read_failure

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def _load(self, category: PackageCategory) -> List[Record]:
        fields = self.guard.read(self.store.get_document, self.collection, category.value)
        if fields is None:
            return []
        return list(fields.get("items") or [])

    def list_category(self, category: Union[str, PackageCategory]) -> List[Record]:
        return self._load(parse_category(category))

    def list_all(self) -> Dict[str, List[Record]]:
        """Every category's list; categories without a document map to []."""
        documents = dict(self.guard.read(self.store.list_documents, self.collection))
        result: Dict[str, List[Record]] = {}
        for category in PackageCategory:
            fields = documents.pop(category.value, None) or {}
            result[category.value] = list(fields.get("items") or [])
        if documents:
            logger.debug(f"Ignoring unknown package documents: {sorted(documents)}")
        return result

    def entries(self, category: Optional[Union[str, PackageCategory]] = None) -> List[Record]:
        """Flattened records tagged with category, index and etag."""
        if category is not None:
            category = parse_category(category)
            lists = {category.value: self._load(category)}
        else:
            lists = self.list_all()
        result: List[Record] = []
        for cat, items in lists.items():
            digest = list_digest(items)
            result.extend(self._entry(PackageCategory(cat), items, idx, digest) for idx in range(len(items)))
        return result

    def search(self, query: str = "", category: Optional[Union[str, PackageCategory]] = None) -> List[Record]:
        """Case-insensitive title/name substring search across categories."""
        needle = (query or "").strip().lower()
        return [
            entry for entry in self.entries(category)
            if needle in str(entry.get("title") or entry.get("name") or "").lower()
        ]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def _save(self, category: PackageCategory, items: List[Record]) -> None:
        self.guard.write(
            self.store.set_document,
            self.collection,
            category.value,
            {"items": items},
            WriteMode.REPLACE,
        )

    @staticmethod
    def _entry(category: PackageCategory, items: List[Record], index: int, digest: Optional[str] = None) -> Record:
        return {
            **items[index],
            "category": category.value,
            "index": index,
            "etag": record_etag(items, index, digest),
        }

    @staticmethod
    def _check_index(category: PackageCategory, items: List[Record], index: int, etag: Optional[str]) -> None:
        if not 0 <= index < len(items):
            raise IndexOutOfRange(
                f"No package at index {index} in {category.value} ({len(items)} stored)"
            )
        if etag is not None and record_etag(items, index) != etag:
            raise StaleRecord(
                f"Package at {category.value}[{index}] has changed since it was read; reload and retry"
            )

    @track_performance("packages.add")
    def add_record(self, category: Union[str, PackageCategory], record: Union[Mapping[str, Any], BaseModel]) -> Record:
        """Append ``record`` to the category list. Returns the stored entry."""
        package = build_package_record(category, record)
        category = package.category
        self.guard.ensure_network()
        read_failed = False
        try:
            items = self._load(category)
        except Exception as e:
            if not self.write_on_read_failure:
                raise
            # Accepted race: a concurrent list written meanwhile is overwritten
            logger.warning(f"Could not read packages/{category.value}, will attempt to write: {e}")
            items = []
            read_failed = True

        items.append(package.to_document())
        try:
            self._save(category, items)
        except Exception as e:
            if read_failed:
                raise StoreUnavailable(
                    f"Content store unavailable: could not read or write packages/{category.value}",
                    details=str(e),
                ) from e
            raise
        return self._entry(category, items, len(items) - 1)

    @track_performance("packages.edit")
    def edit_record(
        self,
        category: Union[str, PackageCategory],
        index: int,
        record: Union[Mapping[str, Any], BaseModel],
        etag: Optional[str] = None,
    ) -> Record:
        """Replace the element at ``index``; every other element is untouched."""
        package = build_package_record(category, record)
        category = package.category
        self.guard.ensure_network()
        items = self._load(category)
        self._check_index(category, items, index, etag)
        items[index] = package.to_document()
        self._save(category, items)
        return self._entry(category, items, index)

    @track_performance("packages.delete")
    def delete_record(self, category: Union[str, PackageCategory], index: int, etag: Optional[str] = None) -> Record:
        """Remove the element at ``index`` and return it."""
        category = parse_category(category)
        self.guard.ensure_network()
        items = self._load(category)
        self._check_index(category, items, index, etag)
        removed = items.pop(index)
        self._save(category, items)
        return removed

    @track_performance("packages.move")
    def move_record(
        self,
        source: Union[str, PackageCategory],
        index: int,
        target: Union[str, PackageCategory],
        record: Optional[Union[Mapping[str, Any], BaseModel]] = None,
        etag: Optional[str] = None,
    ) -> Record:
        """Move ``source[index]`` to the end of the ``target`` list.

        The record is rebuilt against the target category, so fields the
        target does not carry are dropped and its required fields must be
        present. ``record`` replaces the stored values when given. Both lists
        are written in one batch.
        """
        source = parse_category(source)
        target = parse_category(target)
        if source == target:
            raise ValidationFailed(f"Package is already in {source.value}")
        package = build_package_record(target, record) if record is not None else None
        self.guard.ensure_network()
        source_items = self._load(source)
        self._check_index(source, source_items, index, etag)
        if package is None:
            package = build_package_record(target, source_items[index])
        target_items = self._load(target)

        source_items.pop(index)
        target_items.append(package.to_document())
        self.guard.write(
            self.store.commit_batch,
            [
                BatchWrite(self.collection, source.value, {"items": source_items}),
                BatchWrite(self.collection, target.value, {"items": target_items}),
            ],
        )
        logger.info(f"Moved package {source.value}[{index}] to {target.value}[{len(target_items) - 1}]")
        return self._entry(target, target_items, len(target_items) - 1)

    def counts(self) -> Dict[str, int]:
        return {cat: len(items) for cat, items in self.list_all().items()}


class EntityCollectionRepository:
    """One document per entity, validated by ``schema`` before any store call."""

    def __init__(self, store: ContentStore, guard: ConnectivityGuard, collection: str, schema: Any, label: str):
        self.store = store
        self.guard = guard
        self.collection = collection
        self.adapter = TypeAdapter(schema)
        self.label = label

    def _validate(self, fields: Union[Mapping[str, Any], BaseModel]) -> Record:
        if isinstance(fields, BaseModel):
            fields = fields.model_dump(by_alias=True, exclude_none=True)
        try:
            value = self.adapter.validate_python(dict(fields))
        except ValidationError as exc:
            raise ValidationFailed.from_pydantic(exc, prefix=f"Invalid {self.label}")
        return self.adapter.dump_python(value, by_alias=True, exclude_none=True)

    def list(self) -> List[Record]:
        documents = self.guard.read(self.store.list_documents, self.collection)
        return [{"id": key, **fields} for key, fields in documents]

    def count(self) -> int:
        return len(self.guard.read(self.store.list_documents, self.collection))

    def get(self, key: str) -> Record:
        fields = self.guard.read(self.store.get_document, self.collection, key)
        if fields is None:
            raise NotFound(f"{self.label.capitalize()} {key!r} not found")
        return {"id": key, **fields}

    @track_performance("entity.create")
    def create(self, fields: Union[Mapping[str, Any], BaseModel]) -> Record:
        document = self._validate(fields)
        key = self.guard.write(self.store.add_document, self.collection, document)
        logger.info(f"Created {self.label} {key}")
        return {"id": key, **document}

    @track_performance("entity.update")
    def update(self, key: str, fields: Union[Mapping[str, Any], BaseModel]) -> Record:
        """Whole-document replace; fields missing from ``fields`` are dropped."""
        document = self._validate(fields)
        if self.guard.read(self.store.get_document, self.collection, key) is None:
            raise NotFound(f"{self.label.capitalize()} {key!r} not found")
        self.guard.write(self.store.set_document, self.collection, key, document, WriteMode.REPLACE)
        return {"id": key, **document}

    @track_performance("entity.delete")
    def delete(self, key: str) -> None:
        """Idempotent: deleting a missing document succeeds."""
        self.guard.write(self.store.delete_document, self.collection, key)


class SiteSettingsRepository:
    """The ``settings/site`` document, written with merge semantics."""

    collection = SETTINGS_COLLECTION
    key = "site"

    def __init__(self, store: ContentStore, guard: ConnectivityGuard):
        self.store = store
        self.guard = guard

    def get(self) -> SiteSettings:
        fields = self.guard.read(self.store.get_document, self.collection, self.key) or {}
        return SiteSettings.model_validate(fields)

    def update(self, changes: Union[Mapping[str, Any], SiteSettingsUpdate]) -> SiteSettings:
        if not isinstance(changes, SiteSettingsUpdate):
            try:
                changes = SiteSettingsUpdate.model_validate(dict(changes))
            except ValidationError as exc:
                raise ValidationFailed.from_pydantic(exc, prefix="Invalid settings")
        fields = changes.model_dump(by_alias=True, exclude_none=True)
        if fields:
            self.guard.write(self.store.set_document, self.collection, self.key, fields, WriteMode.MERGE)
        return self.get()


def get_package_repository(store: ContentStore, guard: ConnectivityGuard) -> PackageCategoryRepository:
    return PackageCategoryRepository(store, guard, write_on_read_failure=settings.write_on_read_failure)


def get_testimonial_repository(store: ContentStore, guard: ConnectivityGuard) -> EntityCollectionRepository:
    return EntityCollectionRepository(store, guard, TESTIMONIALS_COLLECTION, Testimonial, "testimonial")


def get_highlight_repository(store: ContentStore, guard: ConnectivityGuard) -> EntityCollectionRepository:
    return EntityCollectionRepository(store, guard, HIGHLIGHTS_COLLECTION, DestinationHighlight, "destination highlight")
