"""Publication Service — CRUD over locally persisted works plus work↔project links.

Invariants:
    - A work is only visible through its owner's ORCID id (404 otherwise)
    - Titles are unique per owner after normalize_title (409 on conflict)
    - Authors replaced wholesale on update; positions follow submission order
    - Authors whose ORCID id belongs to a registered user are linked to that user
    - Link/unlink are idempotent

Design Decisions:
    - Views are produced by rendering the row as ORCID JSON and reading it back with
      the live-data mapper (ADR: one Publication shape for local and ORCID works)
    - Owner is created as a stub when missing: the SPA lets a researcher record works
      before saving a profile
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    DuplicateResourceError, ResourceNotFoundError, ErrorContext,
)
from app.core.list_filters import filter_publications, normalize_title
from app.core.orcid_ids import require_orcid
from app.core.orcid_mapping import map_work_to_publication, work_to_orcid_json
from app.core.pagination import paginate
from app.core.payload_rules import clean_authors, clean_links, require_text
from app.models.project import Project
from app.models.user_project import UserProject
from app.models.work import Work
from app.models.work_author import WorkAuthor
from app.models.work_project import WorkProject
from app.schemas.publication import PublicationIn
from app.services.user_store import (
    get_user, get_user_or_404, ensure_user, registered_user_ids,
)

logger = logging.getLogger(__name__)


# ─── Rendering ───────────────────────────────────────────────────

def render_work(work: Work, owner_orcid: str) -> dict:
    return work_to_orcid_json(work, owner_orcid, work.project_ids)


def publication_view(work: Work, owner_orcid: str) -> dict:
    return map_work_to_publication(render_work(work, owner_orcid), default_year=None)


def _sort_key(work: Work) -> tuple[int, int]:
    return (work.year or 0, work.id)


# ─── Lookups ─────────────────────────────────────────────────────

async def _load_work(db: AsyncSession, work_id: int) -> Work | None:
    result = await db.execute(
        select(Work)
        .where(Work.id == work_id)
        .execution_options(populate_existing=True),
    )
    return result.scalar_one_or_none()


async def _owned_works(db: AsyncSession, owner_id: int) -> list[Work]:
    result = await db.execute(
        select(Work)
        .where(Work.owner_id == owner_id)
        .execution_options(populate_existing=True),
    )
    return list(result.scalars().all())


async def _get_owned_work(
    db: AsyncSession, orcid: str, work_id: int,
) -> tuple[str, Work]:
    orcid = require_orcid(orcid)
    user = await get_user_or_404(db, orcid)
    work = await _load_work(db, work_id)
    if work is None or work.owner_id != user.id:
        raise ResourceNotFoundError(
            "Publication", str(work_id),
            ErrorContext(orcid_id=orcid, put_code=str(work_id)),
        )
    return orcid, work


async def _get_owned_project(
    db: AsyncSession, owner_id: int, project_id: int,
) -> Project:
    result = await db.execute(
        select(Project)
        .join(UserProject, UserProject.project_id == Project.id)
        .where(Project.id == project_id, UserProject.user_id == owner_id),
    )
    project = result.scalar_one_or_none()
    if project is None:
        raise ResourceNotFoundError("Project", str(project_id))
    return project


async def owned_title_keys(
    db: AsyncSession, owner_id: int, exclude_id: int | None = None,
) -> set[str]:
    result = await db.execute(
        select(Work.id, Work.title).where(Work.owner_id == owner_id),
    )
    return {
        normalize_title(title) for work_id, title in result.all()
        if work_id != exclude_id
    }


# ─── Building ────────────────────────────────────────────────────

def clean_publication(data: PublicationIn) -> dict:
    """Validate a publication body into column values + cleaned authors."""
    identifier = data.identifier
    identifier_value = (identifier.value.strip() if identifier else "") or None
    return {
        "title": require_text(data.title, "title", "Title"),
        "year": data.year,
        "work_type": (data.type or "").strip() or "journal-article",
        "source": (data.source or "").strip() or None,
        "abstract": (data.abstract or "").strip() or None,
        "identifier_type": (
            (identifier.type.strip() or "other") if identifier_value else None
        ),
        "identifier_value": identifier_value,
        "links": clean_links([link.model_dump() for link in data.links]),
        "authors": clean_authors([a.model_dump() for a in data.authors]),
    }


def build_authors(
    authors: list[dict], registered: dict[str, int],
) -> list[WorkAuthor]:
    return [
        WorkAuthor(
            position=position,
            name=author["name"],
            orcid_id=author["orcid_id"],
            email=author["email"],
            user_id=registered.get(author["orcid_id"] or ""),
        )
        for position, author in enumerate(authors)
    ]


async def build_work(
    db: AsyncSession, owner_id: int, fields: dict,
    project_ids: list[int] | None = None,
) -> Work:
    """Create (not commit) a work from cleaned fields."""
    authors = fields["authors"]
    registered = await registered_user_ids(db, [a["orcid_id"] for a in authors])
    work = Work(
        owner_id=owner_id,
        title=fields["title"],
        year=fields["year"],
        work_type=fields["work_type"],
        source=fields["source"],
        abstract=fields["abstract"],
        identifier_type=fields["identifier_type"],
        identifier_value=fields["identifier_value"],
        links=fields["links"],
        authors=build_authors(authors, registered),
        project_links=[WorkProject(project_id=pid) for pid in project_ids or []],
    )
    db.add(work)
    return work


# ─── Operations ──────────────────────────────────────────────────

async def list_publications(
    db: AsyncSession, orcid: str, query: str | None = None,
    page: int = 1, per_page: int = 10,
) -> dict:
    """Owner's works, newest first, filtered then paginated. Unknown owner → empty page."""
    orcid = require_orcid(orcid)
    user = await get_user(db, orcid)
    works = await _owned_works(db, user.id) if user else []
    works.sort(key=_sort_key, reverse=True)
    views = [publication_view(w, orcid) for w in works]
    items, meta = paginate(filter_publications(views, query), page, per_page)
    return {"items": items, "pagination": meta}


async def get_publication(db: AsyncSession, orcid: str, work_id: int) -> dict:
    orcid, work = await _get_owned_work(db, orcid, work_id)
    return publication_view(work, orcid)


async def create_publication(
    db: AsyncSession, orcid: str, data: PublicationIn,
) -> dict:
    orcid = require_orcid(orcid)
    fields = clean_publication(data)
    user = await ensure_user(db, orcid)

    if normalize_title(fields["title"]) in await owned_title_keys(db, user.id):
        raise DuplicateResourceError(
            "Publication", fields["title"], ErrorContext(orcid_id=orcid),
        )
    project_ids = []
    if data.project_id is not None:
        project = await _get_owned_project(db, user.id, data.project_id)
        project_ids.append(project.id)

    work = await build_work(db, user.id, fields, project_ids)
    await db.commit()
    work = await _load_work(db, work.id)
    logger.info(
        "Publication created",
        extra={"orcid_id": orcid, "put_code": str(work.id)},
    )
    return {
        "message": "Publication created successfully",
        "data": render_work(work, orcid),
    }


async def update_publication(
    db: AsyncSession, orcid: str, work_id: int, data: PublicationIn,
) -> dict:
    orcid, work = await _get_owned_work(db, orcid, work_id)
    fields = clean_publication(data)

    taken = await owned_title_keys(db, work.owner_id, exclude_id=work.id)
    if normalize_title(fields["title"]) in taken:
        raise DuplicateResourceError(
            "Publication", fields["title"], ErrorContext(orcid_id=orcid),
        )
    if data.project_id is not None:
        project = await _get_owned_project(db, work.owner_id, data.project_id)
        if project.id not in work.project_ids:
            work.project_links.append(WorkProject(project_id=project.id))

    authors = fields.pop("authors")
    for column, value in fields.items():
        setattr(work, column, value)
    registered = await registered_user_ids(db, [a["orcid_id"] for a in authors])
    work.authors = build_authors(authors, registered)

    await db.commit()
    work = await _load_work(db, work.id)
    logger.info(
        "Publication updated",
        extra={"orcid_id": orcid, "put_code": str(work.id)},
    )
    return {
        "message": "Publication updated successfully",
        "data": render_work(work, orcid),
    }


async def delete_publication(db: AsyncSession, orcid: str, work_id: int) -> dict:
    orcid, work = await _get_owned_work(db, orcid, work_id)
    await db.delete(work)
    await db.commit()
    logger.info(
        "Publication deleted",
        extra={"orcid_id": orcid, "put_code": str(work_id)},
    )
    return {
        "message": "Publication deleted successfully",
        "data": {"put-code": work_id},
    }


async def _require_pair(
    db: AsyncSession, work_id: int, project_id: int,
) -> tuple[Work, Project]:
    work = await db.get(Work, work_id)
    if work is None:
        raise ResourceNotFoundError("Publication", str(work_id))
    project = await db.get(Project, project_id)
    if project is None:
        raise ResourceNotFoundError("Project", str(project_id))
    return work, project


async def _find_link(
    db: AsyncSession, work_id: int, project_id: int,
) -> WorkProject | None:
    result = await db.execute(
        select(WorkProject).where(
            WorkProject.work_id == work_id,
            WorkProject.project_id == project_id,
        ),
    )
    return result.scalar_one_or_none()


async def link_project(db: AsyncSession, work_id: int, project_id: int) -> dict:
    """Associate a work with a project. Linking an existing pair is a no-op."""
    await _require_pair(db, work_id, project_id)
    if await _find_link(db, work_id, project_id) is not None:
        return {
            "message": "Publication already linked to project",
            "work_id": work_id, "project_id": project_id, "created": False,
        }
    db.add(WorkProject(work_id=work_id, project_id=project_id))
    await db.commit()
    logger.info(
        f"Linked work {work_id} to project {project_id}",
        extra={"put_code": str(work_id)},
    )
    return {
        "message": "Publication linked to project",
        "work_id": work_id, "project_id": project_id, "created": True,
    }


async def unlink_project(db: AsyncSession, work_id: int, project_id: int) -> dict:
    await _require_pair(db, work_id, project_id)
    link = await _find_link(db, work_id, project_id)
    if link is None:
        return {
            "message": "Publication was not linked to project",
            "work_id": work_id, "project_id": project_id, "removed": False,
        }
    await db.delete(link)
    await db.commit()
    logger.info(
        f"Unlinked work {work_id} from project {project_id}",
        extra={"put_code": str(work_id)},
    )
    return {
        "message": "Publication unlinked from project",
        "work_id": work_id, "project_id": project_id, "removed": True,
    }
