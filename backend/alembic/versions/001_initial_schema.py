"""Initial schema — users, research areas, links, works, authors, projects, join tables.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("orcid_id", sa.String(19), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("institution", sa.String(255), nullable=True),
        sa.Column("department", sa.String(255), nullable=True),
        sa.Column("role", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("institutional_page", sa.String(2000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_orcid_id", "users", ["orcid_id"])

    op.create_table(
        "research_areas",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.UniqueConstraint("user_id", "name", name="uq_research_areas_user_name"),
    )

    op.create_table(
        "external_links",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("url", sa.String(2000), nullable=False),
    )

    op.create_table(
        "works",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(1000), nullable=False),
        sa.Column("year", sa.Integer, nullable=True),
        sa.Column("work_type", sa.String(50), nullable=False, server_default="journal-article"),
        sa.Column("source", sa.String(500), nullable=True),
        sa.Column("abstract", sa.Text, nullable=True),
        sa.Column("identifier_type", sa.String(50), nullable=True),
        sa.Column("identifier_value", sa.String(500), nullable=True),
        sa.Column("links", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_works_owner_id", "works", ["owner_id"])

    op.create_table(
        "work_authors",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("work_id", sa.Integer, sa.ForeignKey("works.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("orcid_id", sa.String(19), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
    )
    op.create_index("ix_work_authors_work_id", "work_authors", ["work_id"])
    op.create_index("ix_work_authors_orcid_id", "work_authors", ["orcid_id"])

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(500), nullable=False),
        sa.Column("start_year", sa.Integer, nullable=True),
        sa.Column("end_year", sa.Integer, nullable=True),
        sa.Column("funding_agency", sa.String(500), nullable=True),
        sa.Column("funding", sa.String(255), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "end_year IS NULL OR start_year IS NULL OR end_year >= start_year",
            name="ck_projects_year_order",
        ),
    )

    op.create_table(
        "user_projects",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("project_id", sa.Integer, sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.String(255), nullable=True),
        sa.UniqueConstraint("user_id", "project_id", name="uq_user_projects_pair"),
    )

    op.create_table(
        "work_projects",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("work_id", sa.Integer, sa.ForeignKey("works.id", ondelete="CASCADE"), nullable=False),
        sa.Column("project_id", sa.Integer, sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("work_id", "project_id", name="uq_work_projects_pair"),
    )


def downgrade() -> None:
    op.drop_table("work_projects")
    op.drop_table("user_projects")
    op.drop_table("projects")
    op.drop_index("ix_work_authors_orcid_id", "work_authors")
    op.drop_index("ix_work_authors_work_id", "work_authors")
    op.drop_table("work_authors")
    op.drop_index("ix_works_owner_id", "works")
    op.drop_table("works")
    op.drop_table("external_links")
    op.drop_table("research_areas")
    op.drop_index("ix_users_orcid_id", "users")
    op.drop_table("users")
