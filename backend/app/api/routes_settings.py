"""
Site settings and dashboard routes.
"""

from fastapi import APIRouter, Depends, Request
from typing import Dict, Any
import logging

from app.api.deps import (
    highlight_repository,
    package_repository,
    settings_repository,
    testimonial_repository,
)
from app.core.rate_limiting import limiter, READ_LIMIT, WRITE_LIMIT
from app.core.security import require_admin_key
from app.db.repositories import (
    EntityCollectionRepository,
    PackageCategoryRepository,
    SiteSettingsRepository,
)
from app.schemas.content import SiteSettingsUpdate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["settings"])


@router.get("/settings/site", response_model=Dict[str, Any])
@limiter.limit(READ_LIMIT)
def get_site_settings(request: Request, repo: SiteSettingsRepository = Depends(settings_repository)):
    """Site contact details; defaults apply until the document is first saved."""
    return repo.get().model_dump(by_alias=True)


@router.put("/settings/site", response_model=Dict[str, Any], dependencies=[Depends(require_admin_key)])
@limiter.limit(WRITE_LIMIT)
def update_site_settings(
    request: Request,
    changes: SiteSettingsUpdate,
    repo: SiteSettingsRepository = Depends(settings_repository),
):
    """Merge the submitted fields into the stored settings."""
    updated = repo.update(changes)
    logger.info("Site settings saved")
    return updated.model_dump(by_alias=True)


@router.get("/dashboard/stats", response_model=Dict[str, Any])
@limiter.limit(READ_LIMIT)
def dashboard_stats(
    request: Request,
    packages: PackageCategoryRepository = Depends(package_repository),
    testimonials: EntityCollectionRepository = Depends(testimonial_repository),
    highlights: EntityCollectionRepository = Depends(highlight_repository),
):
    """Content totals for the admin dashboard."""
    per_category = packages.counts()
    return {
        "totalPackages": sum(per_category.values()),
        "packagesByCategory": per_category,
        "totalTestimonials": testimonials.count(),
        "totalDestinations": highlights.count(),
    }
