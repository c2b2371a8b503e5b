"""Profile Service — local researcher profile read, upsert, and ORCID import.

Invariants:
    - upsert_profile runs in one transaction: user, areas, links and author backfill
      commit together or not at all
    - Research areas and external links are replaced, never merged
    - work_authors rows carrying the researcher's ORCID id are linked to the user on save
    - import_from_orcid never duplicates: titles/names already owned are skipped

Design Decisions:
    - Profile responses are ORCID-shaped records (user_to_orcid_record) so the SPA
      renders local and live profiles with the same reader
    - Old areas/links are flushed out before the new ones are inserted
      (ADR: unique (user_id, name) would otherwise collide within one flush)
"""

import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.list_filters import normalize_title
from app.core.orcid_ids import require_orcid
from app.core.orcid_mapping import user_to_orcid_record
from app.core.payload_rules import (
    check_profile_fields, clean_authors, clean_links, clean_research_areas,
)
from app.core.errors import ValidationFailedError
from app.infrastructure.orcid_client import ResilientOrcidClient
from app.models.external_link import ExternalLink
from app.models.research_area import ResearchArea
from app.models.user import User
from app.models.work_author import WorkAuthor
from app.schemas.profile import ProfileUpsert
from app.services import publication_service, project_service
from app.services.researcher_service import load_researcher
from app.services.user_store import get_user, get_user_or_404

logger = logging.getLogger(__name__)


def render_profile(user: User) -> dict:
    return user_to_orcid_record(
        user,
        research_areas=[area.name for area in user.research_areas],
        external_links=[(link.name, link.url) for link in user.external_links],
        works=user.works,
        projects=[membership.project for membership in user.project_links],
    )


async def get_profile(db: AsyncSession, orcid: str) -> dict:
    orcid = require_orcid(orcid)
    user = await get_user_or_404(db, orcid)
    return render_profile(user)


async def _link_author_rows(db: AsyncSession, user: User) -> int:
    result = await db.execute(
        update(WorkAuthor)
        .where(WorkAuthor.orcid_id == user.orcid_id, WorkAuthor.user_id.is_(None))
        .values(user_id=user.id),
    )
    return result.rowcount or 0


async def _apply_profile(
    db: AsyncSession, orcid: str, data: ProfileUpsert,
) -> tuple[User, bool]:
    """Write the profile rows (flushed, not committed). Returns (user, created)."""
    user = await get_user(db, orcid)
    created = user is None
    if created:
        user = User(
            orcid_id=orcid, name=data.name,
            research_areas=[], external_links=[], works=[], project_links=[],
        )
        db.add(user)

    user.name = data.name
    user.institution = data.institution or None
    user.department = data.department
    user.role = data.role
    user.email = data.email
    user.bio = data.bio
    user.institutional_page = data.institutional_page

    areas = clean_research_areas(data.research_areas)
    links = clean_links(
        [link.model_dump() for link in data.external_links], "external_links",
    )
    user.research_areas.clear()
    user.external_links.clear()
    await db.flush()
    user.research_areas.extend(ResearchArea(name=name) for name in areas)
    user.external_links.extend(
        ExternalLink(name=link["name"], url=link["url"]) for link in links
    )
    await db.flush()

    linked = await _link_author_rows(db, user)
    if linked:
        logger.info(
            f"Linked {linked} author rows to profile", extra={"orcid_id": orcid},
        )
    return user, created


async def upsert_profile(
    db: AsyncSession, orcid: str, data: ProfileUpsert,
) -> dict:
    """Create or update the local profile. Returns {message, data}."""
    orcid = require_orcid(orcid)
    check_profile_fields(data.name, data.institution, data.email)
    _, created = await _apply_profile(db, orcid, data)
    await db.commit()
    user = await get_user_or_404(db, orcid)
    logger.info(
        "Profile created" if created else "Profile updated",
        extra={"orcid_id": orcid},
    )
    return {
        "message": (
            "Profile created successfully" if created
            else "Profile updated successfully"
        ),
        "data": render_profile(user),
    }


# ─── Import ──────────────────────────────────────────────────────

def _profile_from_researcher(researcher: dict) -> ProfileUpsert:
    email = researcher.get("email") or None
    return ProfileUpsert(
        name=researcher["name"][:255],
        institution=(researcher.get("institution") or "")[:255],
        department=(researcher.get("department") or "")[:255] or None,
        role=(researcher.get("role") or "")[:255] or None,
        email=email if email and "@" in email else None,
        bio=(researcher.get("bio") or "")[:10_000] or None,
        research_areas=[area[:255] for area in researcher.get("research_areas") or []],
        external_links=[
            {"name": link["name"][:255], "url": link["url"]}
            for link in researcher.get("external_links") or []
            if len(link["url"]) <= 2000
            and link["url"].lower().startswith(("http://", "https://"))
        ],
    )


def _clip(value: str | None, limit: int) -> str | None:
    """Fit an ORCID string into its column; blank becomes None."""
    return value[:limit] if value else None


def _work_fields(publication: dict, owner_name: str, owner_orcid: str) -> dict | None:
    """Publication view → cleaned work fields. None when the view cannot be stored."""
    authors = publication.get("authors") or [
        {"name": owner_name, "orcid_id": owner_orcid, "email": None},
    ]
    identifier = publication.get("identifier") or {}
    links = [
        link for link in publication.get("links") or []
        if str(link.get("url", "")).lower().startswith(("http://", "https://"))
    ]
    try:
        cleaned_authors = clean_authors(
            [{**a, "name": (a.get("name") or "")[:255], "email": None} for a in authors],
        )
        cleaned_links = clean_links(links)
    except ValidationFailedError as e:
        logger.warning(
            f"Skipping ORCID work '{publication.get('title')}': {e.message}",
            extra={"orcid_id": owner_orcid, "put_code": publication.get("id")},
        )
        return None
    return {
        "title": publication["title"][:1000],
        "year": publication.get("year"),
        "work_type": _clip(publication.get("type"), 50) or "journal-article",
        "source": _clip(publication.get("source"), 500),
        "abstract": publication.get("abstract") or None,
        "identifier_type": (
            _clip(identifier.get("type"), 50) if identifier.get("value") else None
        ),
        "identifier_value": _clip(identifier.get("value"), 500),
        "links": cleaned_links,
        "authors": cleaned_authors,
    }


def _project_fields(project: dict) -> dict | None:
    start_year, end_year = project.get("start_year"), project.get("end_year")
    if start_year is not None and end_year is not None and end_year < start_year:
        return None
    return {
        "name": project["name"][:500],
        "start_year": start_year,
        "end_year": end_year,
        "funding_agency": _clip(project.get("funding_agency"), 500),
        "funding": _clip(project.get("funding"), 255),
        "description": project.get("description") or None,
    }


async def import_from_orcid(
    db: AsyncSession,
    client: ResilientOrcidClient,
    orcid: str,
    authorization: str | None = None,
    *,
    concurrency: int = 8,
    limit: int = 100,
) -> dict:
    """Pull the live ORCID aggregate and persist it as the local profile."""
    orcid = require_orcid(orcid)
    researcher = await load_researcher(
        client, orcid, authorization, concurrency=concurrency, limit=limit,
    )
    user, created = await _apply_profile(
        db, orcid, _profile_from_researcher(researcher),
    )

    counts = {"publications": 0, "projects": 0, "skipped": 0}
    titles = await publication_service.owned_title_keys(db, user.id)
    for publication in researcher["publications"]:
        fields = _work_fields(publication, researcher["name"], orcid)
        key = normalize_title(fields["title"]) if fields else None
        if fields is None or key in titles:
            counts["skipped"] += 1
            continue
        await publication_service.build_work(db, user.id, fields)
        titles.add(key)
        counts["publications"] += 1

    names = await project_service.owned_name_keys(db, user.id)
    for project in researcher["projects"]:
        fields = _project_fields(project)
        key = normalize_title(fields["name"]) if fields else None
        if fields is None or key in names:
            counts["skipped"] += 1
            continue
        project_service.build_project(
            db, user.id, fields, _clip(project.get("role"), 255),
        )
        names.add(key)
        counts["projects"] += 1

    await db.commit()
    user = await get_user_or_404(db, orcid)
    logger.info(
        f"Imported {counts['publications']} works and {counts['projects']} "
        f"projects from ORCID ({counts['skipped']} skipped)",
        extra={"orcid_id": orcid},
    )
    return {
        "message": "Profile imported from ORCID",
        "created": created,
        "imported": counts,
        "data": render_profile(user),
    }
