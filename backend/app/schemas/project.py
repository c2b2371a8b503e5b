"""Project Schemas — project input and the Project view.

Invariants:
    - ProjectView.end_year None means ongoing (ongoing mirrors it)
    - publication_ids on input must reference works owned by the same researcher
"""

from pydantic import AliasChoices, Field

from app.schemas.common import CamelModel, PaginationMeta


class ProjectIn(CamelModel):
    """POST/PUT project body. `title` is accepted as a synonym for `name`."""
    name: str = Field(
        "", max_length=500,
        validation_alias=AliasChoices("name", "title"),
    )
    start_year: int | None = Field(None, ge=1900, le=2100)
    end_year: int | None = Field(None, ge=1900, le=2100)
    funding_agency: str | None = Field(None, max_length=500)
    funding: str | None = Field(None, max_length=255)
    description: str | None = Field(None, max_length=20_000)
    role: str | None = Field(None, max_length=255)
    publication_ids: list[int] = Field(
        default_factory=list,
        validation_alias=AliasChoices("publicationIds", "publication_ids"),
    )


class ProjectView(CamelModel):
    id: str | None
    name: str
    title: str
    description: str = ""
    start_year: int | None
    end_year: int | None
    ongoing: bool
    funding: str = ""
    funding_agency: str = ""
    role: str = ""
    publication_ids: list[str] = Field(default_factory=list)


class ProjectPage(CamelModel):
    items: list[ProjectView]
    pagination: PaginationMeta
