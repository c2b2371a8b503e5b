"""Project Service — CRUD over locally persisted projects owned through user_projects.

Invariants:
    - Ownership is the (user, project) user_projects row; its role is the owner's role
    - Names are unique per owner after normalize_title (409 on conflict)
    - end_year is None (ongoing) or >= start_year
    - publication_ids may only reference works owned by the same researcher

Design Decisions:
    - Views come from the ORCID funding rendering read back by map_funding_to_project
      (ADR: one Project shape for local and ORCID fundings)
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    DuplicateResourceError, ResourceNotFoundError, ErrorContext,
)
from app.core.list_filters import filter_projects, normalize_title
from app.core.orcid_ids import require_orcid
from app.core.orcid_mapping import (
    map_funding_to_project, project_to_orcid_json, DEFAULT_PROJECT_ROLE,
)
from app.core.pagination import paginate
from app.core.payload_rules import check_year_range, require_text
from app.models.project import Project
from app.models.user_project import UserProject
from app.models.work import Work
from app.models.work_project import WorkProject
from app.schemas.project import ProjectIn
from app.services.user_store import get_user, get_user_or_404, ensure_user

logger = logging.getLogger(__name__)


def render_project(link: UserProject, owner_orcid: str) -> dict:
    project = link.project
    return project_to_orcid_json(
        project, owner_orcid, link.role, project.work_ids,
    )


def project_view(link: UserProject, owner_orcid: str) -> dict:
    return map_funding_to_project(render_project(link, owner_orcid), default_year=None)


def _sort_key(link: UserProject) -> tuple[int, int]:
    return (link.project.start_year or 0, link.project.id)


async def _memberships(db: AsyncSession, user_id: int) -> list[UserProject]:
    result = await db.execute(
        select(UserProject)
        .where(UserProject.user_id == user_id)
        .execution_options(populate_existing=True),
    )
    return list(result.scalars().all())


async def _get_membership(
    db: AsyncSession, orcid: str, project_id: int,
) -> tuple[str, UserProject]:
    orcid = require_orcid(orcid)
    user = await get_user_or_404(db, orcid)
    result = await db.execute(
        select(UserProject)
        .where(
            UserProject.user_id == user.id,
            UserProject.project_id == project_id,
        )
        .execution_options(populate_existing=True),
    )
    link = result.scalar_one_or_none()
    if link is None:
        raise ResourceNotFoundError(
            "Project", str(project_id),
            ErrorContext(orcid_id=orcid, put_code=str(project_id)),
        )
    return orcid, link


async def _reload(db: AsyncSession, link_id: int) -> UserProject:
    result = await db.execute(
        select(UserProject)
        .where(UserProject.id == link_id)
        .execution_options(populate_existing=True),
    )
    link = result.scalar_one()
    await db.refresh(link.project, attribute_names=["work_links"])
    return link


async def owned_name_keys(
    db: AsyncSession, user_id: int, exclude_id: int | None = None,
) -> set[str]:
    result = await db.execute(
        select(Project.id, Project.name)
        .join(UserProject, UserProject.project_id == Project.id)
        .where(UserProject.user_id == user_id),
    )
    return {
        normalize_title(name) for project_id, name in result.all()
        if project_id != exclude_id
    }


async def _owned_work_ids(
    db: AsyncSession, user_id: int, work_ids: list[int],
) -> list[int]:
    """Return work_ids unchanged if every id is owned by user_id, else 404."""
    if not work_ids:
        return []
    result = await db.execute(
        select(Work.id).where(Work.owner_id == user_id, Work.id.in_(work_ids)),
    )
    owned = set(result.scalars().all())
    for work_id in work_ids:
        if work_id not in owned:
            raise ResourceNotFoundError("Publication", str(work_id))
    return sorted(set(work_ids))


def clean_project(data: ProjectIn) -> dict:
    check_year_range(data.start_year, data.end_year)
    return {
        "name": require_text(data.name, "name", "Project name"),
        "start_year": data.start_year,
        "end_year": data.end_year,
        "funding_agency": (data.funding_agency or "").strip() or None,
        "funding": (data.funding or "").strip() or None,
        "description": (data.description or "").strip() or None,
    }


def build_project(
    db: AsyncSession, user_id: int, fields: dict, role: str | None,
    work_ids: list[int] | None = None,
) -> UserProject:
    """Create (not commit) a project plus its owning membership."""
    link = UserProject(user_id=user_id, role=role or DEFAULT_PROJECT_ROLE)
    project = Project(
        **fields,
        user_links=[link],
        work_links=[WorkProject(work_id=wid) for wid in work_ids or []],
    )
    db.add(project)
    return link


# ─── Operations ──────────────────────────────────────────────────

async def list_projects(
    db: AsyncSession, orcid: str, query: str | None = None,
    page: int = 1, per_page: int = 6,
) -> dict:
    """Owner's projects, most recent start first, filtered then paginated."""
    orcid = require_orcid(orcid)
    user = await get_user(db, orcid)
    links = await _memberships(db, user.id) if user else []
    links.sort(key=_sort_key, reverse=True)
    views = [project_view(link, orcid) for link in links]
    items, meta = paginate(filter_projects(views, query), page, per_page)
    return {"items": items, "pagination": meta}


async def get_project(db: AsyncSession, orcid: str, project_id: int) -> dict:
    orcid, link = await _get_membership(db, orcid, project_id)
    return project_view(link, orcid)


async def create_project(db: AsyncSession, orcid: str, data: ProjectIn) -> dict:
    orcid = require_orcid(orcid)
    fields = clean_project(data)
    user = await ensure_user(db, orcid)

    if normalize_title(fields["name"]) in await owned_name_keys(db, user.id):
        raise DuplicateResourceError(
            "Project", fields["name"], ErrorContext(orcid_id=orcid),
        )
    work_ids = await _owned_work_ids(db, user.id, data.publication_ids)
    link = build_project(db, user.id, fields, data.role, work_ids)
    await db.commit()
    link = await _reload(db, link.id)
    logger.info(
        "Project created",
        extra={"orcid_id": orcid, "put_code": str(link.project_id)},
    )
    return {
        "message": "Project created successfully",
        "data": render_project(link, orcid),
    }


async def update_project(
    db: AsyncSession, orcid: str, project_id: int, data: ProjectIn,
) -> dict:
    orcid, link = await _get_membership(db, orcid, project_id)
    fields = clean_project(data)

    taken = await owned_name_keys(db, link.user_id, exclude_id=project_id)
    if normalize_title(fields["name"]) in taken:
        raise DuplicateResourceError(
            "Project", fields["name"], ErrorContext(orcid_id=orcid),
        )
    project = link.project
    for column, value in fields.items():
        setattr(project, column, value)
    if data.role and data.role.strip():
        link.role = data.role.strip()
    for work_id in await _owned_work_ids(db, link.user_id, data.publication_ids):
        if work_id not in project.work_ids:
            project.work_links.append(WorkProject(work_id=work_id))

    await db.commit()
    link = await _reload(db, link.id)
    logger.info(
        "Project updated",
        extra={"orcid_id": orcid, "put_code": str(project_id)},
    )
    return {
        "message": "Project updated successfully",
        "data": render_project(link, orcid),
    }


async def delete_project(db: AsyncSession, orcid: str, project_id: int) -> dict:
    orcid, link = await _get_membership(db, orcid, project_id)
    await db.delete(link.project)
    await db.commit()
    logger.info(
        "Project deleted",
        extra={"orcid_id": orcid, "put_code": str(project_id)},
    )
    return {
        "message": "Project deleted successfully",
        "data": {"put-code": project_id},
    }
