"""Search Query Builder — turns free text + field filters into ORCID Solr syntax.

Invariants:
    - Blank text and blank filter values never produce clauses
    - Only SEARCH_FIELDS may appear as field names (InvalidSearchFilterError otherwise)
    - Clauses are joined with " AND " in a stable order: free text first, then SEARCH_FIELDS order
    - Field values are quoted with backslashes and quotes escaped, so a value never ends the phrase early

Design Decisions:
    - Stable ordering makes the query string usable as part of the page-cache key
"""

import json

from app.core.errors import InvalidSearchFilterError


SEARCH_FIELDS: tuple[str, ...] = (
    "given-names",
    "family-name",
    "orcid",
    "email",
    "affiliation-org-name",
    "keyword",
    "other-names",
    "grant-number",
    "digital-object-id",
)


def clean_filters(filters: dict[str, str | None] | None) -> dict[str, str]:
    """Drop blank values, trim the rest, reject unknown fields."""
    cleaned: dict[str, str] = {}
    for field, value in (filters or {}).items():
        if field not in SEARCH_FIELDS:
            raise InvalidSearchFilterError(field)
        if value and value.strip():
            cleaned[field] = value.strip()
    return cleaned


def build_orcid_query(
    query: str | None, filters: dict[str, str | None] | None = None,
) -> str:
    """Build the `q` parameter for /v3.0/search. Empty string means nothing to search."""
    cleaned = clean_filters(filters)
    parts: list[str] = []
    if query and query.strip():
        parts.append(query.strip())
    for field in SEARCH_FIELDS:
        if field in cleaned:
            value = cleaned[field].replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'{field}:"{value}"')
    return " AND ".join(parts)


def search_cache_key(
    query: str | None, filters: dict[str, str | None] | None = None,
) -> str:
    return json.dumps(
        {"query": (query or "").strip(), "filters": clean_filters(filters)},
        sort_keys=True,
    )
