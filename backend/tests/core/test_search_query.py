"""Search Query Builder — free text + field filters → ORCID Solr query.

Tests:
    - Clauses joined with AND, free text first, fields in SEARCH_FIELDS order
    - Blank text and blank filter values produce no clauses
    - Unknown filter fields raise InvalidSearchFilterError
    - Cache key is stable under filter ordering and whitespace
"""

import pytest

from app.core.errors import InvalidSearchFilterError
from app.core.search_query import (
    SEARCH_FIELDS, build_orcid_query, clean_filters, search_cache_key,
)


def test_free_text_only():
    assert build_orcid_query("  machine learning ") == "machine learning"


def test_filters_follow_declared_field_order():
    q = build_orcid_query("smith", {"keyword": "graphs", "given-names": " Ada "})
    assert q == 'smith AND given-names:"Ada" AND keyword:"graphs"'


def test_blank_parts_are_skipped():
    assert build_orcid_query("", {"family-name": "  ", "email": None}) == ""
    assert build_orcid_query(None, {"affiliation-org-name": "UnB"}) == (
        'affiliation-org-name:"UnB"'
    )


def test_quotes_in_values_are_escaped():
    assert build_orcid_query(None, {"family-name": 'O"Brien'}) == (
        'family-name:"O\\"Brien"'
    )


def test_trailing_backslash_cannot_close_the_phrase():
    assert build_orcid_query(None, {"affiliation-org-name": "Lab\\"}) == (
        'affiliation-org-name:"Lab\\\\"'
    )
    assert build_orcid_query(None, {"family-name": 'a\\"b'}) == (
        'family-name:"a\\\\\\"b"'
    )


def test_unknown_filter_field_rejected():
    with pytest.raises(InvalidSearchFilterError) as exc_info:
        build_orcid_query("x", {"shoe-size": "42"})
    assert exc_info.value.http_status == 400


def test_every_declared_field_is_accepted():
    filters = {field: "v" for field in SEARCH_FIELDS}
    assert clean_filters(filters) == filters


def test_cache_key_ignores_order_and_whitespace():
    a = search_cache_key(" ada ", {"keyword": "x", "family-name": "Lovelace"})
    b = search_cache_key("ada", {"family-name": "Lovelace ", "keyword": "x"})
    assert a == b


def test_cache_key_differs_per_query():
    assert search_cache_key("ada") != search_cache_key("grace")
