"""Domain Types — verifies identity types and enum wire values.

Tests:
    - NewType wrappers are transparent at runtime
    - OrcidSection lists exactly the proxied record sections
    - Enum values are the ORCID wire strings
"""

from app.core.domain_types import (
    OrcidId, PutCode, WorkId, ProjectId,
    OrcidSection, GrantType, WorkType,
)


def test_identity_types_are_transparent():
    assert OrcidId("0000-0002-1825-0097") == "0000-0002-1825-0097"
    assert PutCode("12") == "12"
    assert WorkId(3) == 3
    assert ProjectId(4) == 4


def test_orcid_section_has_six_sections():
    assert {s.value for s in OrcidSection} == {
        "works", "employments", "educations", "fundings", "peer-reviews", "person",
    }


def test_grant_types_match_oauth_form_values():
    assert GrantType.CLIENT_CREDENTIALS.value == "client_credentials"
    assert GrantType.AUTHORIZATION_CODE.value == "authorization_code"


def test_work_type_default_is_journal_article():
    assert WorkType("journal-article") is WorkType.JOURNAL_ARTICLE
    assert WorkType.JOURNAL_ARTICLE == "journal-article"
