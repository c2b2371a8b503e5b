"""Payload Rules — pure validation and cleanup of profile, publication and project input.

Invariants:
    - Every rule raises ValidationFailedError naming the offending field
    - Cleanup never reorders: authors keep their submitted order (position = index)
    - Blank entries are dropped silently; malformed non-blank entries are rejected

Design Decisions:
    - Operates on plain dicts/strings, not schemas: the import flow feeds ORCID views
      through the same rules as HTTP bodies (ADR: core never imports schemas/)
"""

import re

from app.core.errors import ValidationFailedError
from app.core.orcid_ids import normalize_orcid


EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
_HTTP_URL = re.compile(r"^https?://\S+$", re.IGNORECASE)


def _strip(value: str | None) -> str:
    return (value or "").strip()


def is_valid_email(value: str | None) -> bool:
    return bool(value) and EMAIL_PATTERN.match(value) is not None


def check_profile_fields(name: str | None, institution: str | None, email: str | None) -> None:
    if not _strip(name):
        raise ValidationFailedError("Name is required", "name")
    if not _strip(institution):
        raise ValidationFailedError("Institution is required", "institution")
    if _strip(email) and not is_valid_email(_strip(email)):
        raise ValidationFailedError("Invalid email format", "email")


def check_year_range(start_year: int | None, end_year: int | None) -> None:
    if start_year is not None and end_year is not None and end_year < start_year:
        raise ValidationFailedError(
            "End year must be greater than or equal to start year", "end_year",
        )


def require_text(value: str | None, field: str, label: str) -> str:
    text = _strip(value)
    if not text:
        raise ValidationFailedError(f"{label} is required", field)
    return text


def clean_research_areas(areas: list[str] | None) -> list[str]:
    """Trim, drop blanks, drop case-insensitive duplicates (first spelling wins)."""
    seen: set[str] = set()
    cleaned = []
    for area in areas or []:
        text = _strip(area)
        key = text.casefold()
        if text and key not in seen:
            seen.add(key)
            cleaned.append(text)
    return cleaned


def clean_links(links: list[dict] | None, field: str = "links") -> list[dict]:
    """Keep {name, url} entries with both parts set; URLs must be http(s)."""
    cleaned = []
    for link in links or []:
        name = _strip(link.get("name"))
        url = _strip(link.get("url"))
        if not name or not url:
            continue
        if not _HTTP_URL.match(url):
            raise ValidationFailedError(
                f"Link '{name}' must be an http(s) URL", field,
            )
        cleaned.append({"name": name, "url": url})
    return cleaned


def clean_authors(authors: list[dict] | None) -> list[dict]:
    """Drop nameless authors, normalize ORCID ids, require at least one author."""
    cleaned = []
    for author in authors or []:
        name = _strip(author.get("name"))
        if not name:
            continue
        raw_orcid = _strip(author.get("orcid_id"))
        orcid_id = normalize_orcid(raw_orcid) if raw_orcid else None
        if raw_orcid and orcid_id is None:
            raise ValidationFailedError(
                f"Invalid ORCID for author '{name}'", "authors",
            )
        email = _strip(author.get("email")) or None
        if email and not is_valid_email(email):
            raise ValidationFailedError(
                f"Invalid email for author '{name}'", "authors",
            )
        cleaned.append({"name": name, "orcid_id": orcid_id, "email": email})
    if not cleaned:
        raise ValidationFailedError("At least one author is required", "authors")
    return cleaned
