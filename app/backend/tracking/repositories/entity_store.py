"""Per-entity persistence operations over a SQLAlchemy session."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Generic, TypeVar

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from tracking.db.base import Base
from tracking.models.entities import Account, Person, Project, Role, WeeklySummary

EntityT = TypeVar("EntityT", bound=Base)

# Primary keys are 32-bit INTEGER columns; nothing outside this range can exist.
MAX_KEY = 2**31 - 1


def in_key_range(entity_id: int) -> bool:
    return 1 <= entity_id <= MAX_KEY


class EntityStore(Generic[EntityT]):
    """find/save/delete primitives shared by every entity store.

    Writes only flush; committing belongs to the caller's unit of work.
    """

    model: type[EntityT]

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, entity_id: int) -> EntityT | None:
        if not in_key_range(entity_id):
            return None
        return self.db.scalar(select(self.model).where(self.model.id == entity_id))

    def find_all(self) -> list[EntityT]:
        return self.db.scalars(select(self.model).order_by(self.model.id.asc())).all()

    def save(self, entity: EntityT) -> EntityT:
        self.db.add(entity)
        self.db.flush()
        return entity

    def save_all(self, entities: Iterable[EntityT]) -> list[EntityT]:
        rows = list(entities)
        self.db.add_all(rows)
        self.db.flush()
        return rows

    def delete(self, entity: EntityT) -> None:
        self.db.delete(entity)
        self.db.flush()


class AccountStore(EntityStore[Account]):
    model = Account

    def exists_by_name(self, name: str, *, exclude_id: int | None = None) -> bool:
        conditions = [func.lower(Account.name) == name.strip().lower()]
        if exclude_id is not None:
            conditions.append(Account.id != exclude_id)
        return self.db.scalar(select(func.count(Account.id)).where(and_(*conditions))) > 0

    def project_count(self, account_id: int) -> int:
        return self.db.scalar(select(func.count(Project.id)).where(Project.account_id == account_id))


class ProjectStore(EntityStore[Project]):
    model = Project

    def exists_by_name(self, name: str, *, exclude_id: int | None = None) -> bool:
        """Whether a live (not soft-deleted) project already uses ``name``, ignoring case."""

        conditions = [
            func.lower(Project.name) == name.strip().lower(),
            Project.soft_delete.is_(False),
        ]
        if exclude_id is not None:
            conditions.append(Project.id != exclude_id)
        return self.db.scalar(select(func.count(Project.id)).where(and_(*conditions))) > 0

    def search_by_name(self, name: str) -> list[Project]:
        return self.db.scalars(
            select(Project)
            .where(func.lower(Project.name) == name.strip().lower())
            .order_by(Project.id.asc())
        ).all()

    def find_by_ids(self, project_ids: Iterable[int]) -> list[Project]:
        ids = {project_id for project_id in project_ids if in_key_range(project_id)}
        if not ids:
            return []
        return self.db.scalars(select(Project).where(Project.id.in_(ids)).order_by(Project.id.asc())).all()


class PersonStore(EntityStore[Person]):
    model = Person

    def exists_by_email(self, email: str, *, exclude_id: int | None = None) -> bool:
        conditions = [func.lower(Person.email) == email.strip().lower()]
        if exclude_id is not None:
            conditions.append(Person.id != exclude_id)
        return self.db.scalar(select(func.count(Person.id)).where(and_(*conditions))) > 0

    def search_by_name(self, name: str) -> list[Person]:
        needle = name.strip().lower()
        return self.db.scalars(
            select(Person)
            .where(
                or_(
                    func.lower(Person.first_name) == needle,
                    func.lower(Person.last_name) == needle,
                    func.lower(Person.first_name + " " + Person.last_name) == needle,
                )
            )
            .order_by(Person.id.asc())
        ).all()

    def find_by_role(self, role: Role) -> list[Person]:
        return self.db.scalars(select(Person).where(Person.role == role).order_by(Person.id.asc())).all()

    def find_owners_referencing(self, project: Project) -> list[Person]:
        return self.db.scalars(
            select(Person).where(Person.projects.any(Project.id == project.id)).order_by(Person.id.asc())
        ).all()


class WeeklySummaryStore(EntityStore[WeeklySummary]):
    model = WeeklySummary

    def find_all(self) -> list[WeeklySummary]:
        return self.db.scalars(
            select(WeeklySummary).order_by(WeeklySummary.week_start_date.desc(), WeeklySummary.id.asc())
        ).all()

    def find_owners_referencing(self, project: Project) -> list[WeeklySummary]:
        return self.db.scalars(
            select(WeeklySummary)
            .where(WeeklySummary.projects.any(Project.id == project.id))
            .order_by(WeeklySummary.id.asc())
        ).all()
