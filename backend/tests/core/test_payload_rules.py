"""Payload Rules — profile, publication and project input cleanup.

Tests:
    - Profile requires name and institution; email must be well formed
    - Research areas: trimmed, blanks and case-insensitive duplicates dropped
    - Links: blank entries dropped, non-http(s) URLs rejected
    - Authors: nameless dropped, ORCID normalized, at least one required
    - Year range: end before start rejected
"""

import pytest

from app.core.errors import ValidationFailedError
from app.core.payload_rules import (
    check_profile_fields, check_year_range, clean_authors, clean_links,
    clean_research_areas, is_valid_email, require_text,
)


def test_profile_requires_name():
    with pytest.raises(ValidationFailedError) as exc_info:
        check_profile_fields("  ", "UnB", None)
    assert exc_info.value.field == "name"


def test_profile_requires_institution():
    with pytest.raises(ValidationFailedError) as exc_info:
        check_profile_fields("Ada", "", None)
    assert exc_info.value.field == "institution"


def test_profile_rejects_bad_email():
    with pytest.raises(ValidationFailedError) as exc_info:
        check_profile_fields("Ada", "UnB", "ada@localhost")
    assert exc_info.value.field == "email"


def test_profile_accepts_missing_email():
    check_profile_fields("Ada", "UnB", None)
    check_profile_fields("Ada", "UnB", "")


@pytest.mark.parametrize("email,ok", [
    ("ada@example.org", True),
    ("first.last+tag@dept.uni.br", True),
    ("no-at-sign.org", False),
    ("ada@example.c", False),
])
def test_email_pattern(email, ok):
    assert is_valid_email(email) is ok


def test_research_areas_deduplicated():
    assert clean_research_areas([" AI ", "ai", "", "Graphs", "  "]) == ["AI", "Graphs"]


def test_links_drop_blank_entries():
    links = [{"name": "Lab", "url": "https://lab.org"}, {"name": "", "url": "https://x"},
             {"name": "Empty", "url": "  "}]
    assert clean_links(links) == [{"name": "Lab", "url": "https://lab.org"}]


def test_links_reject_non_http_urls():
    with pytest.raises(ValidationFailedError):
        clean_links([{"name": "Mail", "url": "mailto:ada@example.org"}])


def test_authors_keep_order_and_normalize_orcid():
    authors = clean_authors([
        {"name": "Ada", "orcid_id": "https://orcid.org/0000-0002-1825-0097"},
        {"name": "  "},
        {"name": "Grace", "orcid_id": "", "email": "grace@navy.mil"},
    ])
    assert authors == [
        {"name": "Ada", "orcid_id": "0000-0002-1825-0097", "email": None},
        {"name": "Grace", "orcid_id": None, "email": "grace@navy.mil"},
    ]


def test_authors_require_at_least_one_name():
    with pytest.raises(ValidationFailedError) as exc_info:
        clean_authors([{"name": ""}, {"name": "   "}])
    assert exc_info.value.message == "At least one author is required"


def test_authors_reject_malformed_orcid():
    with pytest.raises(ValidationFailedError):
        clean_authors([{"name": "Ada", "orcid_id": "12345"}])


def test_year_range():
    check_year_range(2020, 2020)
    check_year_range(2020, None)
    with pytest.raises(ValidationFailedError) as exc_info:
        check_year_range(2021, 2020)
    assert exc_info.value.field == "end_year"


def test_require_text():
    assert require_text("  Title ", "title", "Title") == "Title"
    with pytest.raises(ValidationFailedError):
        require_text(None, "title", "Title")
