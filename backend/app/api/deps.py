"""FastAPI dependencies wiring repositories to the process-wide store client."""

from fastapi import Depends

from app.db.repositories import (
    EntityCollectionRepository,
    PackageCategoryRepository,
    SiteSettingsRepository,
    get_highlight_repository,
    get_package_repository,
    get_testimonial_repository,
)
from app.store.base import ContentStore
from app.store.factory import get_guard, get_store
from app.store.guard import ConnectivityGuard


def package_repository(
    store: ContentStore = Depends(get_store),
    guard: ConnectivityGuard = Depends(get_guard),
) -> PackageCategoryRepository:
    return get_package_repository(store, guard)


def testimonial_repository(
    store: ContentStore = Depends(get_store),
    guard: ConnectivityGuard = Depends(get_guard),
) -> EntityCollectionRepository:
    return get_testimonial_repository(store, guard)


def highlight_repository(
    store: ContentStore = Depends(get_store),
    guard: ConnectivityGuard = Depends(get_guard),
) -> EntityCollectionRepository:
    return get_highlight_repository(store, guard)


def settings_repository(
    store: ContentStore = Depends(get_store),
    guard: ConnectivityGuard = Depends(get_guard),
) -> SiteSettingsRepository:
    return SiteSettingsRepository(store, guard)
