"""Project lifecycle: create, update, partial update, soft and hard delete."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from tracking.core.actor import ActorContext
from tracking.core.errors import ConflictError
from tracking.core.identifiers import PROJECT_PREFIX, PROJECT_PREFIXES, Identifier, decode, encode
from tracking.db.session import unit_of_work
from tracking.models.entities import Account, Project
from tracking.repositories.entity_store import AccountStore, ProjectStore
from tracking.services.cascade import CascadeResolver
from tracking.services.integrity import assert_unique_name, clean_name, require_existing

logger = logging.getLogger(__name__)

PROJECT = "Project"
ACCOUNT = "Account"

# Client-settable fields per operation. Audit columns are never among them.
FULL_UPDATE_FIELDS = ("name", "soft_delete", "account_id")
PARTIAL_UPDATE_FIELDS = ("name", "soft_delete", "account_id")
AUDIT_FIELDS = ("created_at", "created_by", "updated_at", "updated_by")


@dataclass(slots=True)
class ProjectCreateData:
    name: str
    account_id: int


@dataclass(slots=True)
class ProjectUpdateData:
    name: str | None = None
    soft_delete: bool | None = None
    account_id: int | None = None
    version: int | None = None


@dataclass(slots=True)
class ProjectPatchData:
    name: str | None = None
    soft_delete: bool | None = None
    account_id: int | None = None
    version: int | None = None
    # Accepted for compatibility with older clients and ignored.
    created_at: datetime | None = None
    created_by: str | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None


def format_project_id(project_id: int) -> str:
    return encode(project_id, PROJECT_PREFIX)


class ProjectLifecycleManager:
    """Orchestrates project mutations around integrity checks and cascade cleanup.

    Every mutating operation runs as one unit of work on the injected session;
    on any failure nothing it wrote is committed.
    """

    def __init__(self, db: Session, cascade: CascadeResolver | None = None) -> None:
        self.db = db
        self.projects = ProjectStore(db)
        self.accounts = AccountStore(db)
        self.cascade = cascade or CascadeResolver.for_projects(db)

    # ---------- Serialization ----------
    @staticmethod
    def serialize_project(project: Project) -> dict[str, object]:
        return {
            "id": project.id,
            "formatted_id": format_project_id(project.id),
            "name": project.name,
            "soft_delete": project.soft_delete,
            "account_id": project.account_id,
            "account_name": project.account.name if project.account is not None else None,
            "version": project.version,
            "created_at": project.created_at.isoformat(),
            "created_by": project.created_by,
            "updated_at": project.updated_at.isoformat(),
            "updated_by": project.updated_by,
        }

    # ---------- Helpers ----------
    @contextmanager
    def _transaction(self) -> Iterator[None]:
        try:
            with unit_of_work(self.db):
                yield
        except StaleDataError as exc:
            raise ConflictError("Project was modified concurrently; reload it and retry.") from exc
        except IntegrityError as exc:
            raise ConflictError("Project change violates a uniqueness or reference constraint.") from exc

    def _load(self, project_id: Identifier) -> Project:
        return require_existing(decode(project_id, PROJECT_PREFIXES), self.projects.find_by_id, PROJECT)

    def _require_account(self, account_id: int) -> Account:
        return require_existing(account_id, self.accounts.find_by_id, ACCOUNT)

    @staticmethod
    def _check_version(project: Project, expected: int | None) -> None:
        if expected is not None and expected != project.version:
            raise ConflictError(
                f"Project {format_project_id(project.id)} is at version {project.version}, "
                f"not {expected}; reload it and retry."
            )

    @staticmethod
    def _stamp(project: Project, actor: ActorContext) -> None:
        project.updated_at = datetime.utcnow()
        project.updated_by = actor.name

    def _apply(self, project: Project, data: ProjectUpdateData | ProjectPatchData, fields: tuple[str, ...]) -> None:
        changes = {field: getattr(data, field) for field in fields if getattr(data, field) is not None}

        target_name = clean_name(changes["name"], PROJECT) if "name" in changes else project.name
        target_deleted = changes.get("soft_delete", project.soft_delete)
        renamed = target_name.lower() != project.name.lower()
        restored = project.soft_delete and not target_deleted
        if not target_deleted and (renamed or restored):
            assert_unique_name(
                target_name,
                lambda name: self.projects.exists_by_name(name, exclude_id=project.id),
                PROJECT,
            )

        if "account_id" in changes:
            project.account = self._require_account(changes["account_id"])
        project.name = target_name
        project.soft_delete = target_deleted

    # ---------- Queries ----------
    def get(self, project_id: Identifier) -> Project:
        return self._load(project_id)

    def list_all(self) -> list[Project]:
        return self.projects.find_all()

    def search(self, name: str) -> list[Project]:
        return self.projects.search_by_name(name)

    # ---------- Mutations ----------
    def create(self, data: ProjectCreateData, actor: ActorContext) -> Project:
        name = clean_name(data.name, PROJECT)
        with self._transaction():
            assert_unique_name(name, self.projects.exists_by_name, PROJECT)
            account = self._require_account(data.account_id)

            now = datetime.utcnow()
            project = Project(
                name=name,
                soft_delete=False,
                account=account,
                created_at=now,
                created_by=actor.name,
                updated_at=now,
                updated_by=actor.name,
            )
            self.projects.save(project)

        self.db.refresh(project)
        logger.info("Created project %s (%s) by %s", format_project_id(project.id), project.name, actor.name)
        return project

    def update(self, project_id: Identifier, data: ProjectUpdateData, actor: ActorContext) -> Project:
        """Full update: apply every whitelisted field the caller supplied, then re-stamp."""

        with self._transaction():
            project = self._load(project_id)
            self._check_version(project, data.version)
            self._apply(project, data, FULL_UPDATE_FIELDS)
            self._stamp(project, actor)
            self.projects.save(project)

        self.db.refresh(project)
        return project

    def partial_update(self, project_id: Identifier, data: ProjectPatchData, actor: ActorContext) -> Project:
        """Field-level merge: only non-null fields change; audit columns stay system-owned."""

        ignored = [field for field in AUDIT_FIELDS if getattr(data, field) is not None]
        if ignored:
            logger.warning("Ignoring client-supplied audit fields %s for project %s", ignored, project_id)

        with self._transaction():
            project = self._load(project_id)
            self._check_version(project, data.version)
            self._apply(project, data, PARTIAL_UPDATE_FIELDS)
            self._stamp(project, actor)
            self.projects.save(project)

        self.db.refresh(project)
        return project

    def soft_delete(self, project_id: Identifier, actor: ActorContext, *, version: int | None = None) -> Project:
        with self._transaction():
            project = self._load(project_id)
            self._check_version(project, version)
            project.soft_delete = True
            self._stamp(project, actor)
            self.projects.save(project)

        self.db.refresh(project)
        logger.info("Soft deleted project %s by %s", format_project_id(project.id), actor.name)
        return project

    def hard_delete(self, project_id: Identifier) -> None:
        with self._transaction():
            project = self._load(project_id)
            formatted = format_project_id(project.id)
            self.cascade.resolve(project)
            self.projects.delete(project)

        logger.info("Permanently deleted project %s", formatted)
