"""Projects — per-researcher project CRUD (six per page by default)."""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.infrastructure.database import get_db
from app.schemas.common import MutationResult
from app.schemas.project import ProjectIn, ProjectPage, ProjectView
from app.services import project_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/profiles/{orcid}/projects", tags=["projects"])


@router.get("", response_model=ProjectPage)
async def list_projects(
    orcid: str,
    q: str | None = Query(None, max_length=500),
    page: int = Query(1, ge=1),
    per_page: int | None = Query(None, alias="perPage", ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await project_service.list_projects(
        db, orcid, q, page, per_page or get_settings().projects_page_size,
    )


@router.post("", response_model=MutationResult, status_code=status.HTTP_201_CREATED)
async def create_project(
    orcid: str, body: ProjectIn, db: AsyncSession = Depends(get_db),
):
    return await project_service.create_project(db, orcid, body)


@router.get("/{project_id}", response_model=ProjectView)
async def get_project(
    orcid: str, project_id: int, db: AsyncSession = Depends(get_db),
):
    return await project_service.get_project(db, orcid, project_id)


@router.put("/{project_id}", response_model=MutationResult)
async def update_project(
    orcid: str, project_id: int, body: ProjectIn,
    db: AsyncSession = Depends(get_db),
):
    return await project_service.update_project(db, orcid, project_id, body)


@router.delete("/{project_id}", response_model=MutationResult)
async def delete_project(
    orcid: str, project_id: int, db: AsyncSession = Depends(get_db),
):
    return await project_service.delete_project(db, orcid, project_id)
