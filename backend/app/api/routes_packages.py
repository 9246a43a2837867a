from fastapi import APIRouter, Depends, Query, Request
from typing import Optional, List, Dict, Any
import logging

from app.api.deps import package_repository
from app.core.rate_limiting import limiter, READ_LIMIT, WRITE_LIMIT
from app.core.security import require_admin_key
from app.db.repositories import PackageCategoryRepository
from app.schemas.packages import (
    CATEGORY_LABELS,
    PackageCategory,
    PackageForm,
    field_policy,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/packages", tags=["packages"])


# ============================================================================
# READ ENDPOINTS
# ============================================================================

@router.get("", response_model=Dict[str, List[Dict[str, Any]]])
@limiter.limit(READ_LIMIT)
def list_packages(request: Request, repo: PackageCategoryRepository = Depends(package_repository)):
    """
    All package lists keyed by category.
    Categories without a stored document are returned as empty lists.
    """
    return repo.list_all()


@router.get("/search", response_model=List[Dict[str, Any]])
@limiter.limit(READ_LIMIT)
def search_packages(
    request: Request,
    q: str = Query("", description="Title/name substring (case-insensitive)"),
    category: Optional[PackageCategory] = Query(None, description="Restrict to one category"),
    repo: PackageCategoryRepository = Depends(package_repository),
):
    """Flattened package entries with category, index and etag."""
    return repo.search(q, category)


@router.get("/meta/categories", response_model=List[Dict[str, Any]])
def get_categories():
    """Category catalogue with the form fields each category requires."""
    catalogue = []
    for category in PackageCategory:
        required, optional = field_policy(category)
        catalogue.append({
            "value": category.value,
            "label": CATEGORY_LABELS[category],
            "required": required,
            "optional": optional,
        })
    return catalogue


@router.get("/{category}", response_model=List[Dict[str, Any]])
@limiter.limit(READ_LIMIT)
def list_category(
    request: Request,
    category: PackageCategory,
    repo: PackageCategoryRepository = Depends(package_repository),
):
    """One category's records in stored order, tagged with index and etag."""
    return repo.entries(category)


# ============================================================================
# WRITE ENDPOINTS (admin key required)
# ============================================================================

@router.post("/{category}", status_code=201, dependencies=[Depends(require_admin_key)])
@limiter.limit(WRITE_LIMIT)
def add_package(
    request: Request,
    category: PackageCategory,
    form: PackageForm,
    repo: PackageCategoryRepository = Depends(package_repository),
):
    """Append a package to the end of the category list."""
    entry = repo.add_record(category, form)
    logger.info(f"Package added to {category.value} at index {entry['index']}")
    return entry


@router.put("/{category}/{index}", dependencies=[Depends(require_admin_key)])
@limiter.limit(WRITE_LIMIT)
def edit_package(
    request: Request,
    category: PackageCategory,
    index: int,
    form: PackageForm,
    etag: str = Query(..., description="etag of the record as last read"),
    move_to: Optional[PackageCategory] = Query(None, description="Move the edited package to this category"),
    repo: PackageCategoryRepository = Depends(package_repository),
):
    """
    Replace the package at ``index``. Fails with 409 if it changed since it was read.
    With ``move_to`` the edited package is appended to that category instead
    and fields the new category does not carry are dropped.
    """
    if move_to is not None and move_to != category:
        return repo.move_record(category, index, move_to, form, etag=etag)
    entry = repo.edit_record(category, index, form, etag=etag)
    logger.info(f"Package {category.value}[{index}] updated")
    return entry


@router.delete("/{category}/{index}", dependencies=[Depends(require_admin_key)])
@limiter.limit(WRITE_LIMIT)
def delete_package(
    request: Request,
    category: PackageCategory,
    index: int,
    etag: str = Query(..., description="etag of the record as last read"),
    repo: PackageCategoryRepository = Depends(package_repository),
):
    """Remove the package at ``index``; later packages shift down by one."""
    removed = repo.delete_record(category, index, etag=etag)
    logger.info(f"Package {category.value}[{index}] deleted")
    return {"deleted": True, "category": category.value, "record": removed}
