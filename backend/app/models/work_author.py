"""WorkAuthor ORM — one contributor line of a work.

Invariants:
    - Always belongs to a Work (work_id FK)
    - position is 0-based and unique within a work
    - user_id set only when orcid_id matches a registered User

Design Decisions:
    - Authors are rows, not JSON: registered users can be linked after the fact
      when they create their profile (ADR: upsert_profile backfills user_id)
"""

from sqlalchemy import String, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class WorkAuthor(Base):
    """Contributor on a work, optionally linked to a local researcher."""
    __tablename__ = "work_authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    work_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("works.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    orcid_id: Mapped[str | None] = mapped_column(
        String(19), nullable=True, index=True,
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )

    # Relationships
    work: Mapped["Work"] = relationship("Work", back_populates="authors")
