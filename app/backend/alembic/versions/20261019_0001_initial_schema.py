"""initial schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


person_role = sa.Enum("employee", "manager", name="person_role")
tech_stack = sa.Enum(
    "java",
    "python",
    "dotnet",
    "javascript",
    "react",
    "angular",
    "devops",
    "qa",
    "data",
    name="tech_stack",
)


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(length=255), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_by", sa.String(length=255), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("soft_delete", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_audit_columns(),
    )

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("soft_delete", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        *_audit_columns(),
    )
    op.create_index("ix_projects_account_id", "projects", ["account_id"])
    op.create_index(
        "uq_projects_active_name",
        "projects",
        [sa.text("lower(name)")],
        unique=True,
        postgresql_where=sa.text("NOT soft_delete"),
        sqlite_where=sa.text("NOT soft_delete"),
    )

    op.create_table(
        "persons",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(length=128), nullable=False),
        sa.Column("last_name", sa.String(length=128), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("role", person_role, nullable=False),
        sa.Column("tech_stack", tech_stack, nullable=True),
    )
    op.create_index("ix_persons_role", "persons", ["role"])

    op.create_table(
        "weekly_summaries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("week_start_date", sa.Date(), nullable=False),
        sa.Column("week_end_date", sa.Date(), nullable=False),
        sa.Column("summary_text", sa.String(length=4000), nullable=True),
    )
    op.create_index("ix_weekly_summaries_week_start", "weekly_summaries", ["week_start_date"])

    op.create_table(
        "person_projects",
        sa.Column("person_id", sa.Integer(), sa.ForeignKey("persons.id"), primary_key=True, nullable=False),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), primary_key=True, nullable=False),
    )
    op.create_index("ix_person_projects_project_id", "person_projects", ["project_id"])

    op.create_table(
        "weekly_summary_projects",
        sa.Column(
            "weekly_summary_id",
            sa.Integer(),
            sa.ForeignKey("weekly_summaries.id"),
            primary_key=True,
            nullable=False,
        ),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), primary_key=True, nullable=False),
    )
    op.create_index("ix_weekly_summary_projects_project_id", "weekly_summary_projects", ["project_id"])


def downgrade() -> None:
    op.drop_index("ix_weekly_summary_projects_project_id", table_name="weekly_summary_projects")
    op.drop_table("weekly_summary_projects")

    op.drop_index("ix_person_projects_project_id", table_name="person_projects")
    op.drop_table("person_projects")

    op.drop_index("ix_weekly_summaries_week_start", table_name="weekly_summaries")
    op.drop_table("weekly_summaries")

    op.drop_index("ix_persons_role", table_name="persons")
    op.drop_table("persons")

    op.drop_index("uq_projects_active_name", table_name="projects")
    op.drop_index("ix_projects_account_id", table_name="projects")
    op.drop_table("projects")

    op.drop_table("accounts")

    tech_stack.drop(op.get_bind(), checkfirst=True)
    person_role.drop(op.get_bind(), checkfirst=True)
