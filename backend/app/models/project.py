"""Project ORM — a locally persisted funded project.

Invariants:
    - name is non-nullable; unique per owner, case-insensitive (enforced in project_service)
    - end_year is None (ongoing) or >= start_year
    - deleting a project deletes its user and work links

Design Decisions:
    - Ownership lives on user_projects, not here: a project may later gain members
      (ADR: the join row carries the member's role)
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Project(Base):
    """Funded project entity — rendered as an ORCID funding."""
    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint(
            "end_year IS NULL OR start_year IS NULL OR end_year >= start_year",
            name="ck_projects_year_order",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    start_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    end_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    funding_agency: Mapped[str | None] = mapped_column(String(500), nullable=True)
    funding: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )

    # Relationships
    user_links: Mapped[list["UserProject"]] = relationship(
        "UserProject", back_populates="project",
        cascade="all, delete-orphan", lazy="selectin",
    )
    work_links: Mapped[list["WorkProject"]] = relationship(
        "WorkProject", back_populates="project",
        cascade="all, delete-orphan", lazy="selectin",
    )

    @property
    def work_ids(self) -> list[int]:
        return sorted(link.work_id for link in self.work_links)
