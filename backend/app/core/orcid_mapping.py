"""ORCID Mapping — pure translation between ORCID v3.0 JSON and application views.

Invariants:
    - Every reader tolerates missing AND null keys (ORCID emits `null` liberally)
    - Views are plain dicts with snake_case keys; schemas/ handles camelCase aliases
    - Local rows are rendered in the same shape ORCID returns, so one set of readers
      serves both live and persisted data
    - No IO, no clock reads except the current-year fallback for live ORCID data;
      local rows read back with default_year=None keep a missing year missing

Design Decisions:
    - Employment summaries read both `summaries[0].organization` and the v3.0 wrapped form
      `summaries[0]["employment-summary"].organization` (ADR: fixtures in the wild use both)
    - Local-only data (links, project associations, role, institutional page) travels in
      non-ORCID keys on the same objects rather than a parallel envelope
"""

from datetime import datetime, timezone
from typing import Any, Iterable
from urllib.parse import urlencode

from app.core.record_protocols import WorkLike, ProjectLike, UserLike


ORCID_HOST = "orcid.org"
UNKNOWN_RESEARCHER = "Unknown Researcher"
UNTITLED_WORK = "Untitled"
UNTITLED_PROJECT = "Untitled Project"
DEFAULT_WORK_TYPE = "journal-article"
DEFAULT_PROJECT_ROLE = "Researcher"


# ─── Readers ─────────────────────────────────────────────────────

def _get(obj: Any, *path: str) -> Any:
    """Walk nested dicts, returning None at the first missing/null hop."""
    for key in path:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
        if obj is None:
            return None
    return obj


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _parse_int(value: Any) -> int | None:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def current_year() -> int:
    return datetime.now(timezone.utc).year


# Missing years on live ORCID data fall back to the current year; local rows pass None.
_CURRENT_YEAR: Any = object()


def _year_or_default(value: Any, default_year: Any) -> int | None:
    year = _parse_int(value)
    if year is not None:
        return year
    return current_year() if default_year is _CURRENT_YEAR else default_year


def _first_summary(group: Any, wrapper_key: str) -> dict:
    summaries = _as_list(_get(group, "summaries"))
    if not summaries:
        return {}
    summary = summaries[0] or {}
    return summary.get(wrapper_key) or summary


def _first_employment(record: dict) -> dict:
    groups = _as_list(
        _get(record, "activities-summary", "employments", "affiliation-group"),
    )
    if not groups:
        return {}
    return _first_summary(groups[0], "employment-summary")


def display_name(record: dict, fallback: str = UNKNOWN_RESEARCHER) -> str:
    name = _get(record, "person", "name")
    if not name:
        return fallback
    given = _get(name, "given-names", "value") or ""
    family = _get(name, "family-name", "value") or ""
    full = f"{given} {family}".strip()
    if full:
        return full
    return _get(name, "credit-name", "value") or fallback


def _education_lines(record: dict) -> list[str]:
    lines = []
    groups = _as_list(
        _get(record, "activities-summary", "educations", "affiliation-group"),
    )
    for group in groups:
        edu = _first_summary(group, "education-summary")
        org = _get(edu, "organization", "name") or ""
        role = edu.get("role-title") or ""
        start = _get(edu, "start-date", "year", "value") or ""
        end = _get(edu, "end-date", "year", "value") or ""
        if start and end:
            date_range = f" ({start}-{end})"
        elif start:
            date_range = f" ({start})"
        else:
            date_range = ""
        line = f"{role} - {org}{date_range}".strip()
        if line and line != "-":
            lines.append(line)
    return lines


def _award_lines(record: dict) -> list[str]:
    lines = []
    groups = _as_list(
        _get(record, "activities-summary", "distinctions", "affiliation-group"),
    )
    for group in groups:
        distinction = _first_summary(group, "distinction-summary")
        org = _get(distinction, "organization", "name") or ""
        role = distinction.get("role-title") or "Award"
        year = _get(distinction, "start-date", "year", "value")
        suffix = f" ({year})" if year else ""
        lines.append(f"{role} - {org}{suffix}".strip())
    return lines


def _external_links(record: dict) -> list[dict]:
    urls = _as_list(_get(record, "person", "researcher-urls", "researcher-url"))
    links = []
    for entry in urls:
        url = _get(entry, "url", "value")
        if url:
            links.append({
                "name": (entry or {}).get("url-name") or "External Link",
                "url": url,
            })
    return links


def map_record_to_researcher(record: dict) -> dict:
    """Full ORCID record (or a local record rendering) → Researcher view."""
    employment = _first_employment(record)
    emails = _as_list(_get(record, "person", "emails", "email"))
    keywords = _as_list(_get(record, "person", "keywords", "keyword"))
    works = _as_list(_get(record, "activities-summary", "works", "group"))
    return {
        "name": display_name(record),
        "orcid_id": _get(record, "orcid-identifier", "path") or "",
        "institution": _get(employment, "organization", "name") or "",
        "department": employment.get("department-name") or "",
        "role": employment.get("role-title") or "",
        "email": (emails[0] or {}).get("email") or "" if emails else "",
        "bio": _get(record, "person", "biography", "content") or "",
        "institutional_page": record.get("institutional-page") or "",
        "research_areas": [
            kw["content"] for kw in keywords
            if isinstance(kw, dict) and kw.get("content")
        ],
        "education": _education_lines(record),
        "awards": _award_lines(record),
        "external_links": _external_links(record),
        "publications_count": len(works),
        "publications": [],
        "projects": [],
    }


def _contributors(work: dict) -> list[dict]:
    authors = []
    for contributor in _as_list(_get(work, "contributors", "contributor")):
        name = _get(contributor, "credit-name", "value")
        if not name:
            continue
        authors.append({
            "name": name,
            "orcid_id": _get(contributor, "contributor-orcid", "path") or "",
            "email": (contributor or {}).get("contributor-email"),
        })
    return authors


def _work_links(work: dict) -> list[dict]:
    links = []
    for ext in _as_list(_get(work, "external-ids", "external-id")):
        url = _get(ext, "external-id-url", "value")
        if url:
            links.append({
                "name": f"{ext.get('external-id-type') or 'External'} Link",
                "url": url,
            })
    url = _get(work, "url", "value")
    if url:
        links.append({"name": "Publication URL", "url": url})
    for link in _as_list(work.get("links")):
        if isinstance(link, dict) and link.get("url"):
            links.append({"name": link.get("name") or "Link", "url": link["url"]})
    return links


def map_work_to_publication(
    work: dict, authors: list[dict] | None = None, default_year: Any = _CURRENT_YEAR,
) -> dict:
    """Detailed ORCID work (GET /work/{put-code}) → Publication view."""
    identifier = {"type": "other", "value": ""}
    ext_ids = _as_list(_get(work, "external-ids", "external-id"))
    if ext_ids:
        first = ext_ids[0] or {}
        identifier = {
            "type": first.get("external-id-type") or "other",
            "value": first.get("external-id-value") or "",
        }
    put_code = work.get("put-code")
    return {
        "id": str(put_code) if put_code is not None else None,
        "title": _get(work, "title", "title", "value") or UNTITLED_WORK,
        "authors": authors if authors else _contributors(work),
        "year": _year_or_default(
            _get(work, "publication-date", "year", "value"), default_year,
        ),
        "type": work.get("type") or DEFAULT_WORK_TYPE,
        "source": _get(work, "journal-title", "value") or "",
        "identifier": identifier,
        "abstract": work.get("short-description") or "",
        "links": _work_links(work),
        "project_ids": [str(pid) for pid in _as_list(work.get("projects"))],
    }


def map_work_summary_to_publication(
    summary: dict, owner_name: str, owner_orcid: str, index: int = 0,
) -> dict:
    """Record-level work summary (no contributors) → Publication view owned by the record holder."""
    put_code = summary.get("put-code")
    return {
        "id": str(put_code) if put_code is not None else f"pub-{index}",
        "title": _get(summary, "title", "title", "value") or UNTITLED_WORK,
        "authors": [{"name": owner_name, "orcid_id": owner_orcid, "email": None}],
        "year": (
            _parse_int(_get(summary, "publication-date", "year", "value"))
            or current_year()
        ),
        "type": summary.get("type") or DEFAULT_WORK_TYPE,
        "source": _get(summary, "journal-title", "value") or "",
        "identifier": {"type": "doi", "value": ""},
        "abstract": "",
        "links": [],
        "project_ids": [],
    }


def _agency_label(organization: dict | None) -> str:
    name = _get(organization, "name") or ""
    city = _get(organization, "address", "city")
    country = _get(organization, "address", "country")
    label = name
    if city:
        label += f", {city}"
    if country:
        label += f", {country}"
    return label


def _amount_label(amount: dict | None) -> str:
    value = _get(amount, "value")
    if not value:
        return ""
    currency = _get(amount, "currency-code")
    return f"{value} {currency}" if currency else str(value)


def map_funding_to_project(funding: dict, default_year: Any = _CURRENT_YEAR) -> dict:
    """Detailed ORCID funding (GET /funding/{put-code}) → Project view. end_year None = ongoing."""
    title = _get(funding, "title", "title", "value") or UNTITLED_PROJECT
    agency = _agency_label(funding.get("organization"))
    description = funding.get("short-description") or ""
    funding_type = funding.get("type")
    if not description and funding_type:
        description = f"{funding_type} funding from {agency}".strip()
    end_year = _parse_int(_get(funding, "end-date", "year", "value"))
    put_code = funding.get("put-code")
    if put_code is None:
        ext_ids = _as_list(_get(funding, "external-ids", "external-id"))
        put_code = (ext_ids[0] or {}).get("external-id-value") if ext_ids else None
    return {
        "id": str(put_code) if put_code is not None else None,
        "name": title,
        "title": title,
        "description": description,
        "start_year": _year_or_default(
            _get(funding, "start-date", "year", "value"), default_year,
        ),
        "end_year": end_year,
        "ongoing": end_year is None,
        "funding": _amount_label(funding.get("amount")),
        "funding_agency": agency,
        "role": funding.get("role") or DEFAULT_PROJECT_ROLE,
        "publication_ids": [str(wid) for wid in _as_list(funding.get("works"))],
    }


def extract_put_codes(section: dict, summary_key: str) -> list[str]:
    """Put-codes from a /works or /fundings listing (first summary of each group)."""
    codes = []
    for group in _as_list(_get(section, "group")):
        summaries = _as_list(_get(group, summary_key))
        if not summaries:
            continue
        put_code = (summaries[0] or {}).get("put-code")
        if put_code is not None:
            codes.append(str(put_code))
    return codes


def extract_search_orcid_ids(search_response: dict) -> list[str]:
    ids = []
    for item in _as_list(_get(search_response, "result")):
        path = _get(item, "orcid-identifier", "path")
        if path:
            ids.append(path)
    return ids


def search_total(search_response: dict) -> int:
    return _parse_int(_get(search_response, "num-found")) or 0


def build_orcid_auth_url(
    oauth_url: str, client_id: str, redirect_uri: str, state: str,
    scope: str = "/authenticate",
) -> str:
    params = urlencode({
        "client_id": client_id,
        "response_type": "code",
        "scope": scope,
        "redirect_uri": redirect_uri,
        "state": state,
    })
    return f"{oauth_url.rstrip('/')}/authorize?{params}"


# ─── Writers (local rows → ORCID shape) ──────────────────────────

def _value(v: Any) -> dict | None:
    return {"value": v} if v not in (None, "") else None


def _year(year: int | None) -> dict | None:
    return {"year": {"value": str(year)}} if year else None


def _epoch_ms(moment: datetime | None) -> dict | None:
    if moment is None:
        return None
    return {"value": int(moment.timestamp() * 1000)}


def _orcid_ref(orcid_id: str | None) -> dict | None:
    if not orcid_id:
        return None
    return {
        "uri": f"https://{ORCID_HOST}/{orcid_id}",
        "path": orcid_id,
        "host": ORCID_HOST,
    }


def work_to_orcid_json(
    work: WorkLike, owner_orcid: str, project_ids: Iterable[int] = (),
) -> dict:
    """Local work → ORCID work JSON. put-code is the local id."""
    external_ids = []
    if work.identifier_value:
        external_ids.append({
            "external-id-type": work.identifier_type or "other",
            "external-id-value": work.identifier_value,
            "external-id-url": None,
            "external-id-relationship": "self",
        })
    contributors = []
    for author in sorted(work.authors, key=lambda a: a.position):
        contributors.append({
            "credit-name": _value(author.name),
            "contributor-orcid": _orcid_ref(author.orcid_id),
            "contributor-email": author.email,
            "contributor-attributes": {
                "contributor-sequence": "first" if author.position == 0 else "additional",
                "contributor-role": "author",
            },
        })
    return {
        "put-code": work.id,
        "path": f"/{owner_orcid}/work/{work.id}",
        "created-date": _epoch_ms(work.created_at),
        "last-modified-date": _epoch_ms(work.updated_at),
        "title": {"title": {"value": work.title}, "subtitle": None},
        "journal-title": _value(work.source),
        "short-description": work.abstract,
        "type": work.work_type,
        "publication-date": _year(work.year),
        "external-ids": {"external-id": external_ids},
        "url": None,
        "contributors": {"contributor": contributors},
        "links": list(work.links or []),
        "projects": sorted(project_ids),
    }


def work_to_summary_json(work: WorkLike) -> dict:
    return {
        "put-code": work.id,
        "title": {"title": {"value": work.title}},
        "type": work.work_type,
        "journal-title": _value(work.source),
        "publication-date": _year(work.year),
    }


def project_to_orcid_json(
    project: ProjectLike, owner_orcid: str, role: str | None = None,
    work_ids: Iterable[int] = (),
) -> dict:
    """Local project → ORCID funding JSON. put-code is the local id."""
    return {
        "put-code": project.id,
        "path": f"/{owner_orcid}/funding/{project.id}",
        "created-date": _epoch_ms(project.created_at),
        "last-modified-date": _epoch_ms(project.updated_at),
        "type": None,
        "title": {"title": {"value": project.name}},
        "short-description": project.description,
        "amount": (
            {"value": project.funding, "currency-code": None}
            if project.funding else None
        ),
        "start-date": _year(project.start_year),
        "end-date": _year(project.end_year),
        "organization": (
            {"name": project.funding_agency} if project.funding_agency else None
        ),
        "role": role,
        "works": sorted(work_ids),
    }


def user_to_orcid_record(
    user: UserLike,
    research_areas: Iterable[str] = (),
    external_links: Iterable[tuple[str, str]] = (),
    works: Iterable[WorkLike] = (),
    projects: Iterable[ProjectLike] = (),
) -> dict:
    """Local user → ORCID /record JSON."""
    employment = {
        "organization": {"name": user.institution} if user.institution else None,
        "department-name": user.department,
        "role-title": user.role,
    }
    return {
        "orcid-identifier": _orcid_ref(user.orcid_id),
        "institutional-page": user.institutional_page,
        "person": {
            "last-modified-date": _epoch_ms(user.updated_at),
            "name": {
                "given-names": _value(user.name),
                "family-name": None,
                "credit-name": _value(user.name),
            },
            "biography": {"content": user.bio} if user.bio else None,
            "emails": {
                "email": [{"email": user.email}] if user.email else [],
            },
            "keywords": {
                "keyword": [{"content": area} for area in research_areas],
            },
            "researcher-urls": {
                "researcher-url": [
                    {"url-name": name, "url": {"value": url}}
                    for name, url in external_links
                ],
            },
        },
        "activities-summary": {
            "employments": {
                "affiliation-group": [
                    {"summaries": [{"employment-summary": employment}]},
                ],
            },
            "works": {
                "group": [
                    {"work-summary": [work_to_summary_json(w)]} for w in works
                ],
            },
            "fundings": {
                "group": [
                    {"funding-summary": [{
                        "put-code": p.id,
                        "title": {"title": {"value": p.name}},
                    }]}
                    for p in projects
                ],
            },
        },
    }
