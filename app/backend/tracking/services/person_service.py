"""Person management and project tagging."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tracking.core.errors import DuplicateNameError
from tracking.core.identifiers import (
    EMPLOYEE_PREFIX,
    MANAGER_PREFIX,
    PERSON_PREFIXES,
    PROJECT_PREFIXES,
    Identifier,
    decode,
    encode,
)
from tracking.db.session import unit_of_work
from tracking.models.entities import Person, Project, Role, TechStack
from tracking.repositories.entity_store import PersonStore, ProjectStore
from tracking.services.integrity import require_all, require_existing

logger = logging.getLogger(__name__)

PERSON = "Person"
PROJECT = "Project"


@dataclass(slots=True)
class PersonCreateData:
    first_name: str
    last_name: str
    email: str
    role: Role = Role.EMPLOYEE
    tech_stack: TechStack | None = None
    project_ids: list[Identifier] = field(default_factory=list)


@dataclass(slots=True)
class PersonUpdateData:
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    role: Role | None = None
    tech_stack: TechStack | None = None
    # Replaces the whole project set when supplied.
    project_ids: list[Identifier] | None = None


def person_prefix(role: Role) -> str:
    return MANAGER_PREFIX if role is Role.MANAGER else EMPLOYEE_PREFIX


def format_person_id(person: Person) -> str:
    return encode(person.id, person_prefix(person.role))


class PersonService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.persons = PersonStore(db)
        self.projects = ProjectStore(db)

    @staticmethod
    def serialize_person(person: Person) -> dict[str, object]:
        return {
            "id": person.id,
            "employee_code": format_person_id(person),
            "first_name": person.first_name,
            "last_name": person.last_name,
            "email": person.email,
            "role": person.role.value,
            "tech_stack": person.tech_stack.value if person.tech_stack is not None else None,
            "project_ids": [project.id for project in person.projects],
            "project_names": [project.name for project in person.projects],
        }

    def _load(self, person_id: Identifier) -> Person:
        return require_existing(decode(person_id, PERSON_PREFIXES), self.persons.find_by_id, PERSON)

    def _resolve_projects(self, project_ids: Iterable[Identifier]) -> list[Project]:
        ids = [decode(project_id, PROJECT_PREFIXES) for project_id in project_ids]
        return require_all(ids, self.projects.find_by_ids, PROJECT)

    def _assert_unique_email(self, email: str, *, exclude_id: int | None = None) -> None:
        if self.persons.exists_by_email(email, exclude_id=exclude_id):
            raise DuplicateNameError(PERSON, email, field="email")

    @contextmanager
    def _transaction(self, email: str | None = None) -> Iterator[None]:
        try:
            with unit_of_work(self.db):
                yield
        except IntegrityError as exc:
            raise DuplicateNameError(PERSON, email or "", field="email") from exc

    # ---------- Queries ----------
    def list_persons(self) -> list[Person]:
        return self.persons.find_all()

    def get_person(self, person_id: Identifier) -> Person:
        return self._load(person_id)

    def search_persons(self, name: str) -> list[Person]:
        return self.persons.search_by_name(name)

    def list_persons_by_role(self, role: Role) -> list[Person]:
        return self.persons.find_by_role(role)

    def list_persons_by_project(self, project_id: Identifier) -> list[Person]:
        project = require_existing(decode(project_id, PROJECT_PREFIXES), self.projects.find_by_id, PROJECT)
        return self.persons.find_owners_referencing(project)

    # ---------- Mutations ----------
    def create_person(self, data: PersonCreateData) -> Person:
        email = data.email.strip().lower()
        with self._transaction(email):
            self._assert_unique_email(email)
            person = Person(
                first_name=data.first_name.strip(),
                last_name=data.last_name.strip(),
                email=email,
                role=data.role,
                tech_stack=data.tech_stack,
                projects=self._resolve_projects(data.project_ids),
            )
            self.persons.save(person)

        self.db.refresh(person)
        logger.info("Created person %s", format_person_id(person))
        return person

    def update_person(self, person_id: Identifier, data: PersonUpdateData) -> Person:
        email = data.email.strip().lower() if data.email is not None else None
        with self._transaction(email):
            person = self._load(person_id)
            if email is not None:
                self._assert_unique_email(email, exclude_id=person.id)
                person.email = email
            if data.first_name is not None:
                person.first_name = data.first_name.strip()
            if data.last_name is not None:
                person.last_name = data.last_name.strip()
            if data.role is not None:
                person.role = data.role
            if data.tech_stack is not None:
                person.tech_stack = data.tech_stack
            if data.project_ids is not None:
                person.projects = self._resolve_projects(data.project_ids)
            self.persons.save(person)

        self.db.refresh(person)
        return person

    def tag_projects(self, person_id: Identifier, project_ids: list[Identifier]) -> Person:
        """Add projects to a person's set; already tagged projects are left as they are."""

        with self._transaction():
            person = self._load(person_id)
            tagged = {project.id for project in person.projects}
            for project in self._resolve_projects(project_ids):
                if project.id not in tagged:
                    person.projects.append(project)
            self.persons.save(person)

        self.db.refresh(person)
        logger.info("Tagged %s to projects %s", format_person_id(person), [p.id for p in person.projects])
        return person

    def delete_person(self, person_id: Identifier) -> None:
        with unit_of_work(self.db):
            person = self._load(person_id)
            self.persons.delete(person)
        logger.info("Deleted person %s", person_id)
