"""ResearchArea ORM — one keyword on a researcher profile.

Invariants:
    - Unique per (user_id, name)
    - Always belongs to a User (user_id FK)
"""

from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class ResearchArea(Base):
    """Research area keyword, rendered as an ORCID person keyword."""
    __tablename__ = "research_areas"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_research_areas_user_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="research_areas")
