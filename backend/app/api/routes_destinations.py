"""
Destination highlight routes.
Each highlight is either a video (videoUrl, thumbnail) or a description
(title, description, background), selected by ``type``. Updates replace the
whole document, so switching type drops the other variant's fields.
"""

from fastapi import APIRouter, Body, Depends, Request
from typing import List, Dict, Any
import logging

from app.api.deps import highlight_repository
from app.core.rate_limiting import limiter, READ_LIMIT, WRITE_LIMIT
from app.core.security import require_admin_key
from app.db.repositories import EntityCollectionRepository
from app.schemas.content import DestinationHighlight

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/destination-highlights", tags=["destination-highlights"])


@router.get("", response_model=List[Dict[str, Any]])
@limiter.limit(READ_LIMIT)
def list_highlights(request: Request, repo: EntityCollectionRepository = Depends(highlight_repository)):
    return repo.list()


@router.get("/{highlight_id}", response_model=Dict[str, Any])
@limiter.limit(READ_LIMIT)
def get_highlight(
    request: Request,
    highlight_id: str,
    repo: EntityCollectionRepository = Depends(highlight_repository),
):
    return repo.get(highlight_id)


@router.post("", status_code=201, dependencies=[Depends(require_admin_key)])
@limiter.limit(WRITE_LIMIT)
def create_highlight(
    request: Request,
    payload: DestinationHighlight = Body(...),
    repo: EntityCollectionRepository = Depends(highlight_repository),
):
    return repo.create(payload)


@router.put("/{highlight_id}", dependencies=[Depends(require_admin_key)])
@limiter.limit(WRITE_LIMIT)
def update_highlight(
    request: Request,
    highlight_id: str,
    payload: DestinationHighlight = Body(...),
    repo: EntityCollectionRepository = Depends(highlight_repository),
):
    return repo.update(highlight_id, payload)


@router.delete("/{highlight_id}", dependencies=[Depends(require_admin_key)])
@limiter.limit(WRITE_LIMIT)
def delete_highlight(
    request: Request,
    highlight_id: str,
    repo: EntityCollectionRepository = Depends(highlight_repository),
):
    repo.delete(highlight_id)
    return {"deleted": True, "id": highlight_id}
