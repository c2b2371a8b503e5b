"""Work ORM — a locally persisted publication owned by one researcher.

Invariants:
    - owner_id is non-nullable; the id doubles as the local put-code
    - title unique per owner, case-insensitive (enforced in publication_service)
    - authors ordered by position; at least one author (enforced in publication_service)
    - deleting a work deletes its authors and project links

Design Decisions:
    - links as JSON list of {name, url}: always read/written whole with the work
      (ADR: no query ever filters by link)
    - identifier split into type/value columns: mirrors ORCID external-id
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Work(Base):
    """Publication entity — rendered as an ORCID work."""
    __tablename__ = "works"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    title: Mapped[str] = mapped_column(String(1000), nullable=False)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    work_type: Mapped[str] = mapped_column(
        String(50), nullable=False, default="journal-article",
    )
    source: Mapped[str | None] = mapped_column(String(500), nullable=True)
    abstract: Mapped[str | None] = mapped_column(Text, nullable=True)
    identifier_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    identifier_value: Mapped[str | None] = mapped_column(
        String(500), nullable=True,
    )
    links: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )

    # Relationships
    owner: Mapped["User"] = relationship("User", back_populates="works")
    authors: Mapped[list["WorkAuthor"]] = relationship(
        "WorkAuthor", back_populates="work",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="WorkAuthor.position",
    )
    project_links: Mapped[list["WorkProject"]] = relationship(
        "WorkProject", back_populates="work",
        cascade="all, delete-orphan", lazy="selectin",
    )

    @property
    def project_ids(self) -> list[int]:
        return sorted(link.project_id for link in self.project_links)
