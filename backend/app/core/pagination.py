"""Pagination — page arithmetic shared by local lists and ORCID search.

Invariants:
    - Pages are 1-based; per_page >= 1
    - visible_pages always contains page 1 and the last page (when > 1)
    - A gap of exactly one page shows that page instead of "..."
"""

import math
from typing import Sequence, TypeVar

T = TypeVar("T")

ELLIPSIS = "..."


def page_window(page: int, per_page: int) -> tuple[int, int]:
    """Zero-based [start, end) offsets for a page."""
    start = (max(page, 1) - 1) * per_page
    return start, start + per_page


def total_pages(total: int, per_page: int) -> int:
    return math.ceil(total / per_page) if total > 0 else 0


def has_next_page(page: int, per_page: int, total: int) -> bool:
    start, _ = page_window(page, per_page)
    return start + per_page < total


def visible_pages(current: int, total: int, delta: int = 2) -> list[int | str]:
    """Page links around `current`, e.g. [1, "...", 4, 5, 6, 7, 8, "...", 20]."""
    if total <= 0:
        return []
    pages = [1]
    for i in range(max(2, current - delta), min(total - 1, current + delta) + 1):
        pages.append(i)
    if total > 1:
        pages.append(total)

    with_gaps: list[int | str] = []
    previous = None
    for page in pages:
        if previous is not None:
            if page - previous == 2:
                with_gaps.append(previous + 1)
            elif page - previous != 1:
                with_gaps.append(ELLIPSIS)
        with_gaps.append(page)
        previous = page
    return with_gaps


def pagination_meta(page: int, per_page: int, total: int) -> dict:
    start, _ = page_window(page, per_page)
    pages = total_pages(total, per_page)
    return {
        "page": page,
        "per_page": per_page,
        "total_items": total,
        "total_pages": pages,
        "has_next": has_next_page(page, per_page, total),
        "has_previous": page > 1,
        "start_item": start + 1 if start < total else 0,
        "end_item": min(page * per_page, total) if start < total else 0,
        "visible_pages": visible_pages(page, pages),
    }


def paginate(items: Sequence[T], page: int, per_page: int) -> tuple[list[T], dict]:
    """Slice one page out of an in-memory list and describe it."""
    start, end = page_window(page, per_page)
    return list(items[start:end]), pagination_meta(page, per_page, len(items))
