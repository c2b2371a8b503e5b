"""User ORM — a locally persisted researcher profile keyed by ORCID id.

Invariants:
    - orcid_id is unique and matches the ORCID format (validated before insert)
    - name is non-nullable; all other profile fields optional
    - research_areas, external_links, works and project links die with the user

Design Decisions:
    - Integer surrogate key; the ORCID id is a natural key used for lookups only
      (ADR: stub users are created before the researcher ever edits the profile)
    - selectin loading on every collection: the profile is always rendered whole
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Researcher profile — owns works, research areas, links and project memberships."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    orcid_id: Mapped[str] = mapped_column(
        String(19), nullable=False, unique=True, index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    institution: Mapped[str | None] = mapped_column(String(255), nullable=True)
    department: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    institutional_page: Mapped[str | None] = mapped_column(
        String(2000), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )

    # Relationships
    research_areas: Mapped[list["ResearchArea"]] = relationship(
        "ResearchArea", back_populates="user",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="ResearchArea.id",
    )
    external_links: Mapped[list["ExternalLink"]] = relationship(
        "ExternalLink", back_populates="user",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="ExternalLink.id",
    )
    works: Mapped[list["Work"]] = relationship(
        "Work", back_populates="owner",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="Work.id",
    )
    project_links: Mapped[list["UserProject"]] = relationship(
        "UserProject", back_populates="user",
        cascade="all, delete-orphan", lazy="selectin",
    )
