"""ORM entities for the employee tracking schema."""

from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    func,
    text,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tracking.db.base import Base


class Role(str, enum.Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"


class TechStack(str, enum.Enum):
    JAVA = "java"
    PYTHON = "python"
    DOTNET = "dotnet"
    JAVASCRIPT = "javascript"
    REACT = "react"
    ANGULAR = "angular"
    DEVOPS = "devops"
    QA = "qa"
    DATA = "data"


class AuditMixin:
    """System-stamped audit columns. Never populated from client payloads."""

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_by: Mapped[str] = mapped_column(String(255), nullable=False)


person_projects = Table(
    "person_projects",
    Base.metadata,
    Column("person_id", ForeignKey("persons.id"), primary_key=True),
    Column("project_id", ForeignKey("projects.id"), primary_key=True),
    Index("ix_person_projects_project_id", "project_id"),
)


weekly_summary_projects = Table(
    "weekly_summary_projects",
    Base.metadata,
    Column("weekly_summary_id", ForeignKey("weekly_summaries.id"), primary_key=True),
    Column("project_id", ForeignKey("projects.id"), primary_key=True),
    Index("ix_weekly_summary_projects_project_id", "project_id"),
)


class Account(AuditMixin, Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    soft_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    projects: Mapped[list[Project]] = relationship(back_populates="account", order_by="Project.id")


class Project(AuditMixin, Base):
    __tablename__ = "projects"
    __table_args__ = (Index("ix_projects_account_id", "account_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    soft_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    account_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Persons and weekly summaries hold the association sets; a project has no
    # back-reference so that hard delete must detach them explicitly.
    account: Mapped[Account] = relationship(back_populates="projects")

    __mapper_args__ = {"version_id_col": version}


# Case-insensitive name uniqueness among live projects.
Index(
    "uq_projects_active_name",
    func.lower(Project.name),
    unique=True,
    postgresql_where=text("NOT soft_delete"),
    sqlite_where=text("NOT soft_delete"),
)


class Person(Base):
    __tablename__ = "persons"
    __table_args__ = (Index("ix_persons_role", "role"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(128), nullable=False)
    last_name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    role: Mapped[Role] = mapped_column(
        SQLEnum(
            Role,
            name="person_role",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=Role.EMPLOYEE,
    )
    tech_stack: Mapped[TechStack | None] = mapped_column(
        SQLEnum(
            TechStack,
            name="tech_stack",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=True,
    )

    projects: Mapped[list[Project]] = relationship(secondary=person_projects, order_by="Project.id")


class WeeklySummary(Base):
    __tablename__ = "weekly_summaries"
    __table_args__ = (Index("ix_weekly_summaries_week_start", "week_start_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    week_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    week_end_date: Mapped[date] = mapped_column(Date, nullable=False)
    summary_text: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    projects: Mapped[list[Project]] = relationship(secondary=weekly_summary_projects, order_by="Project.id")
