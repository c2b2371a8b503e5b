"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - OrcidId is always a normalized id (see core/orcid_ids.py)
    - WorkId/ProjectId are local surrogate keys; a WorkId doubles as the local put-code
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (ADR: values are ORCID wire strings)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

OrcidId = NewType("OrcidId", str)
PutCode = NewType("PutCode", str)
WorkId = NewType("WorkId", int)
ProjectId = NewType("ProjectId", int)
UserId = NewType("UserId", int)


# ─── Enums ───────────────────────────────────────────────────────

class OrcidSection(str, Enum):
    """Record sections the proxy forwards to /v3.0/{orcid}/{section}."""
    WORKS = "works"
    EMPLOYMENTS = "employments"
    EDUCATIONS = "educations"
    FUNDINGS = "fundings"
    PEER_REVIEWS = "peer-reviews"
    PERSON = "person"


class GrantType(str, Enum):
    """OAuth grant types accepted by POST /oauth/token."""
    CLIENT_CREDENTIALS = "client_credentials"
    AUTHORIZATION_CODE = "authorization_code"


class WorkType(str, Enum):
    """Common ORCID work types offered by the publication form."""
    JOURNAL_ARTICLE = "journal-article"
    CONFERENCE_PAPER = "conference-paper"
    BOOK_CHAPTER = "book-chapter"
    BOOK = "book"
    REPORT = "report"
    THESIS = "thesis"
    DISSERTATION = "dissertation"
    OTHER = "other"
