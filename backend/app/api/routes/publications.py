"""Publications — per-researcher work CRUD and work↔project links.

Invariants:
    - Work routes are scoped by the owner's ORCID id; link routes address works by id
    - Create returns 201; linking an already linked pair returns 200 with created=false
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.infrastructure.database import get_db
from app.schemas.common import MutationResult
from app.schemas.publication import (
    PublicationIn, PublicationPage, PublicationView, ProjectLinkResult,
)
from app.services import publication_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["publications"])


@router.get("/profiles/{orcid}/publications", response_model=PublicationPage)
async def list_publications(
    orcid: str,
    q: str | None = Query(None, max_length=500),
    page: int = Query(1, ge=1),
    per_page: int | None = Query(None, alias="perPage", ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await publication_service.list_publications(
        db, orcid, q, page, per_page or get_settings().publications_page_size,
    )


@router.post(
    "/profiles/{orcid}/publications",
    response_model=MutationResult,
    status_code=status.HTTP_201_CREATED,
)
async def create_publication(
    orcid: str, body: PublicationIn, db: AsyncSession = Depends(get_db),
):
    return await publication_service.create_publication(db, orcid, body)


@router.get(
    "/profiles/{orcid}/publications/{work_id}", response_model=PublicationView,
)
async def get_publication(
    orcid: str, work_id: int, db: AsyncSession = Depends(get_db),
):
    return await publication_service.get_publication(db, orcid, work_id)


@router.put(
    "/profiles/{orcid}/publications/{work_id}", response_model=MutationResult,
)
async def update_publication(
    orcid: str, work_id: int, body: PublicationIn,
    db: AsyncSession = Depends(get_db),
):
    return await publication_service.update_publication(db, orcid, work_id, body)


@router.delete(
    "/profiles/{orcid}/publications/{work_id}", response_model=MutationResult,
)
async def delete_publication(
    orcid: str, work_id: int, db: AsyncSession = Depends(get_db),
):
    return await publication_service.delete_publication(db, orcid, work_id)


@router.post(
    "/publications/{work_id}/projects/{project_id}",
    response_model=ProjectLinkResult,
)
async def link_project(
    work_id: int, project_id: int, response: Response,
    db: AsyncSession = Depends(get_db),
):
    result = await publication_service.link_project(db, work_id, project_id)
    if result["created"]:
        response.status_code = status.HTTP_201_CREATED
    return result


@router.delete(
    "/publications/{work_id}/projects/{project_id}",
    response_model=ProjectLinkResult,
)
async def unlink_project(
    work_id: int, project_id: int, db: AsyncSession = Depends(get_db),
):
    return await publication_service.unlink_project(db, work_id, project_id)
