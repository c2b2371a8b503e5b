"""Publication Schemas — work input and the Publication view.

Invariants:
    - PublicationIn.year within 1000..3000 when given
    - PublicationView.id is the put-code as a string (ORCID put-codes and local ids alike)
"""

from pydantic import Field

from app.core.domain_types import WorkType
from app.schemas.common import CamelModel, LinkIn, LinkView, PaginationMeta


class AuthorIn(CamelModel):
    name: str = Field("", max_length=255)
    orcid_id: str | None = Field(None, max_length=64)
    email: str | None = Field(None, max_length=255)


class IdentifierIn(CamelModel):
    type: str = Field("doi", max_length=50)
    value: str = Field("", max_length=500)


class PublicationIn(CamelModel):
    """POST/PUT publication body. project_id optionally links an owned project."""
    title: str = Field("", max_length=1000)
    year: int | None = Field(None, ge=1000, le=3000)
    type: str = Field(WorkType.JOURNAL_ARTICLE.value, max_length=50)
    source: str | None = Field(None, max_length=500)
    abstract: str | None = Field(None, max_length=20_000)
    identifier: IdentifierIn | None = None
    authors: list[AuthorIn] = Field(default_factory=list)
    links: list[LinkIn] = Field(default_factory=list)
    project_id: int | None = None


class AuthorView(CamelModel):
    name: str
    orcid_id: str | None = ""
    email: str | None = None


class IdentifierView(CamelModel):
    type: str
    value: str


class PublicationView(CamelModel):
    id: str | None
    title: str
    authors: list[AuthorView]
    year: int | None
    type: str
    source: str = ""
    identifier: IdentifierView
    abstract: str = ""
    links: list[LinkView] = Field(default_factory=list)
    project_ids: list[str] = Field(default_factory=list)


class PublicationPage(CamelModel):
    items: list[PublicationView]
    pagination: PaginationMeta


class ProjectLinkResult(CamelModel):
    message: str
    work_id: int
    project_id: int
    created: bool = False
    removed: bool = False
