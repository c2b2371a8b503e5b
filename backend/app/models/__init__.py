"""ORM Models — SQLAlchemy declarative models for all ORCID++ entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - User is the aggregate root for profiles and works; projects are owned via user_projects

Design Decisions:
    - One file per entity for locality (ADR: ExMA max 3-4 files to understand a feature)
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from app.models.user import User  # noqa: F401
from app.models.research_area import ResearchArea  # noqa: F401
from app.models.external_link import ExternalLink  # noqa: F401
from app.models.work import Work  # noqa: F401
from app.models.work_author import WorkAuthor  # noqa: F401
from app.models.project import Project  # noqa: F401
from app.models.user_project import UserProject  # noqa: F401
from app.models.work_project import WorkProject  # noqa: F401
