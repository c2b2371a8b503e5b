"""List Filters — case-insensitive text filtering over Publication/Project views.

Invariants:
    - Empty or whitespace-only query keeps every item, in order
    - Matching is substring, case-insensitive, on view dicts (never ORM rows)
"""

import re


PUBLICATION_TYPE_LABELS: dict[str, str] = {
    "journal-article": "Journal Article",
    "conference-paper": "Conference Paper",
    "book-chapter": "Book Chapter",
    "book": "Book",
    "report": "Report",
    "thesis": "Thesis",
    "dissertation": "Dissertation",
    "other": "Other",
}

_WHITESPACE = re.compile(r"\s+")


def normalize_title(value: str | None) -> str:
    """Key used for duplicate detection: casefolded, whitespace collapsed."""
    return _WHITESPACE.sub(" ", (value or "").strip()).casefold()


def format_publication_type(work_type: str) -> str:
    return PUBLICATION_TYPE_LABELS.get(work_type, work_type)


def _contains(haystack: str | None, needle: str) -> bool:
    return needle in (haystack or "").lower()


def filter_publications(items: list[dict], query: str | None) -> list[dict]:
    if not query or not query.strip():
        return list(items)
    needle = query.strip().lower()
    return [
        item for item in items
        if _contains(item.get("title"), needle)
        or _contains(item.get("source"), needle)
        or _contains(item.get("type"), needle)
        or any(_contains(a.get("name"), needle) for a in item.get("authors", []))
    ]


def filter_projects(items: list[dict], query: str | None) -> list[dict]:
    if not query or not query.strip():
        return list(items)
    needle = query.strip().lower()
    return [
        item for item in items
        if _contains(item.get("name"), needle)
        or _contains(item.get("title"), needle)
        or _contains(item.get("description"), needle)
    ]
