"""Record Protocols — structural contracts for local rows rendered as ORCID JSON.

Invariants:
    - Core NEVER imports ORM models — mapping functions accept these Protocols
    - Attribute names match the ORM columns one-to-one

Design Decisions:
    - Protocol over ABC: structural subtyping, ORM classes satisfy it without inheritance
      (ADR: dependency arrows point inward only)
"""

from datetime import datetime
from typing import Protocol, Sequence


class AuthorLike(Protocol):
    position: int
    name: str
    orcid_id: str | None
    email: str | None


class WorkLike(Protocol):
    id: int
    title: str
    year: int | None
    work_type: str
    source: str | None
    abstract: str | None
    identifier_type: str | None
    identifier_value: str | None
    links: list
    created_at: datetime
    updated_at: datetime

    @property
    def authors(self) -> Sequence[AuthorLike]: ...


class ProjectLike(Protocol):
    id: int
    name: str
    start_year: int | None
    end_year: int | None
    funding_agency: str | None
    funding: str | None
    description: str | None
    created_at: datetime
    updated_at: datetime


class UserLike(Protocol):
    orcid_id: str
    name: str
    institution: str | None
    department: str | None
    role: str | None
    email: str | None
    bio: str | None
    institutional_page: str | None
    updated_at: datetime
