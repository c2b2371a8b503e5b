"""Profile Schemas — researcher profile input and the Researcher view.

Invariants:
    - ProfileUpsert fields are stripped; emptiness and email format are checked in
      core/payload_rules.py so import and HTTP share one rule set
    - ResearcherView mirrors core/orcid_mapping.map_record_to_researcher keys

Design Decisions:
    - Lenient input schema, strict service rules: the service returns field-level
      VALIDATION_ERROR details the SPA already renders (ADR: one error envelope)
"""

from pydantic import Field, field_validator

from app.schemas.common import CamelModel, LinkIn, LinkView
from app.schemas.publication import PublicationView
from app.schemas.project import ProjectView


class ProfileUpsert(CamelModel):
    """PUT /profiles/{orcid} body."""
    name: str = Field("", max_length=255)
    institution: str = Field("", max_length=255)
    department: str | None = Field(None, max_length=255)
    role: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=255)
    bio: str | None = Field(None, max_length=10_000)
    institutional_page: str | None = Field(None, max_length=2000)
    research_areas: list[str] = Field(default_factory=list)
    external_links: list[LinkIn] = Field(default_factory=list)

    @field_validator("name", "institution")
    @classmethod
    def strip_required(cls, v: str) -> str:
        return v.strip()

    @field_validator("department", "role", "email", "bio", "institutional_page")
    @classmethod
    def strip_optional(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class ResearcherView(CamelModel):
    """Researcher as displayed by the profile page (live or local)."""
    name: str
    orcid_id: str
    institution: str = ""
    department: str = ""
    role: str = ""
    email: str = ""
    bio: str = ""
    institutional_page: str = ""
    research_areas: list[str] = Field(default_factory=list)
    education: list[str] = Field(default_factory=list)
    awards: list[str] = Field(default_factory=list)
    external_links: list[LinkView] = Field(default_factory=list)
    publications_count: int = 0
    publications: list[PublicationView] = Field(default_factory=list)
    projects: list[ProjectView] = Field(default_factory=list)
