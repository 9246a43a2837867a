"""
Testimonial routes.
One document per testimonial; updates replace the whole document.
"""

from fastapi import APIRouter, Depends, Request
from typing import List, Dict, Any
import logging

from app.api.deps import testimonial_repository
from app.core.rate_limiting import limiter, READ_LIMIT, WRITE_LIMIT
from app.core.security import require_admin_key
from app.db.repositories import EntityCollectionRepository
from app.schemas.content import Testimonial

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/testimonials", tags=["testimonials"])


@router.get("", response_model=List[Dict[str, Any]])
@limiter.limit(READ_LIMIT)
def list_testimonials(request: Request, repo: EntityCollectionRepository = Depends(testimonial_repository)):
    return repo.list()


@router.get("/{testimonial_id}", response_model=Dict[str, Any])
@limiter.limit(READ_LIMIT)
def get_testimonial(
    request: Request,
    testimonial_id: str,
    repo: EntityCollectionRepository = Depends(testimonial_repository),
):
    return repo.get(testimonial_id)


@router.post("", status_code=201, dependencies=[Depends(require_admin_key)])
@limiter.limit(WRITE_LIMIT)
def create_testimonial(
    request: Request,
    payload: Testimonial,
    repo: EntityCollectionRepository = Depends(testimonial_repository),
):
    return repo.create(payload)


@router.put("/{testimonial_id}", dependencies=[Depends(require_admin_key)])
@limiter.limit(WRITE_LIMIT)
def update_testimonial(
    request: Request,
    testimonial_id: str,
    payload: Testimonial,
    repo: EntityCollectionRepository = Depends(testimonial_repository),
):
    return repo.update(testimonial_id, payload)


@router.delete("/{testimonial_id}", dependencies=[Depends(require_admin_key)])
@limiter.limit(WRITE_LIMIT)
def delete_testimonial(
    request: Request,
    testimonial_id: str,
    repo: EntityCollectionRepository = Depends(testimonial_repository),
):
    repo.delete(testimonial_id)
    return {"deleted": True, "id": testimonial_id}
