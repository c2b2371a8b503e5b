"""Pagination — page arithmetic and visible page links.

Tests:
    - page_window / total_pages / has_next_page boundaries
    - visible_pages keeps first/last, fills single-page gaps, uses "..." otherwise
    - paginate slices and describes the last partial page
"""

from app.core.pagination import (
    page_window, total_pages, has_next_page, visible_pages,
    pagination_meta, paginate,
)


def test_page_window_is_zero_based():
    assert page_window(1, 10) == (0, 10)
    assert page_window(3, 6) == (12, 18)


def test_page_window_clamps_page_below_one():
    assert page_window(0, 10) == (0, 10)


def test_total_pages():
    assert total_pages(0, 10) == 0
    assert total_pages(10, 10) == 1
    assert total_pages(11, 10) == 2


def test_has_next_page():
    assert has_next_page(1, 10, 11)
    assert not has_next_page(2, 10, 11)
    assert not has_next_page(1, 10, 10)


def test_visible_pages_middle_of_long_range():
    assert visible_pages(10, 20) == [1, "...", 8, 9, 10, 11, 12, "...", 20]


def test_visible_pages_fills_single_gap_instead_of_ellipsis():
    assert visible_pages(5, 20) == [1, 2, 3, 4, 5, 6, 7, "...", 20]
    assert visible_pages(1, 5) == [1, 2, 3, 4, 5]


def test_visible_pages_degenerate_totals():
    assert visible_pages(1, 0) == []
    assert visible_pages(1, 1) == [1]
    assert visible_pages(2, 2) == [1, 2]


def test_pagination_meta_for_middle_page():
    meta = pagination_meta(2, 10, 25)
    assert meta["total_pages"] == 3
    assert meta["has_next"] and meta["has_previous"]
    assert (meta["start_item"], meta["end_item"]) == (11, 20)


def test_pagination_meta_for_empty_list():
    meta = pagination_meta(1, 10, 0)
    assert meta["start_item"] == 0
    assert meta["end_item"] == 0
    assert meta["visible_pages"] == []
    assert not meta["has_next"]


def test_paginate_last_partial_page():
    items, meta = paginate(list(range(25)), 3, 10)
    assert items == [20, 21, 22, 23, 24]
    assert meta["end_item"] == 25
    assert not meta["has_next"]


def test_paginate_beyond_last_page_is_empty():
    items, meta = paginate(list(range(5)), 4, 6)
    assert items == []
    assert meta["total_items"] == 5
    assert (meta["start_item"], meta["end_item"]) == (0, 0)


def test_pagination_meta_past_the_end_reports_no_items():
    meta = pagination_meta(3, 10, 5)
    assert (meta["start_item"], meta["end_item"]) == (0, 0)
    assert meta["total_pages"] == 1
    assert not meta["has_next"]
