"""WorkProject ORM — association between a work and a project.

Invariants:
    - Unique per (work_id, project_id); linking twice is a no-op in publication_service
"""

from sqlalchemy import Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class WorkProject(Base):
    __tablename__ = "work_projects"
    __table_args__ = (
        UniqueConstraint("work_id", "project_id", name="uq_work_projects_pair"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    work_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("works.id", ondelete="CASCADE"), nullable=False,
    )
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False,
    )

    # Relationships
    work: Mapped["Work"] = relationship("Work", back_populates="project_links")
    project: Mapped["Project"] = relationship(
        "Project", back_populates="work_links",
    )
