"""Project lifecycle endpoints."""

from __future__ import annotations

import logging
from typing import Annotated
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field, StringConstraints
from sqlalchemy.orm import Session

from tracking.core.actor import ActorContext, get_actor_context
from tracking.db.session import get_db_session
from tracking.services.lifecycle import (
    ProjectCreateData,
    ProjectLifecycleManager,
    ProjectPatchData,
    ProjectUpdateData,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])

# Checked after trimming, so whitespace-only names are rejected.
EntityName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class ProjectCreatePayload(BaseModel):
    name: EntityName
    account_id: int = Field(ge=1)


class ProjectUpdatePayload(BaseModel):
    name: EntityName | None = None
    soft_delete: bool | None = None
    account_id: int | None = Field(default=None, ge=1)
    version: int | None = Field(default=None, ge=1)


class ProjectPatchPayload(ProjectUpdatePayload):
    created_at: datetime | None = None
    created_by: str | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None


def _lifecycle(db: Session) -> ProjectLifecycleManager:
    return ProjectLifecycleManager(db)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreatePayload,
    actor: ActorContext = Depends(get_actor_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    logger.info("Creating project with name: %s", payload.name)
    manager = _lifecycle(db)
    project = manager.create(ProjectCreateData(name=payload.name, account_id=payload.account_id), actor)
    return manager.serialize_project(project)


@router.get("")
def list_projects(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    manager = _lifecycle(db)
    return {"items": [manager.serialize_project(project) for project in manager.list_all()]}


@router.get("/search")
def search_projects(
    name: str = Query(min_length=1),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    manager = _lifecycle(db)
    return {"items": [manager.serialize_project(project) for project in manager.search(name)]}


@router.get("/{project_id}")
def get_project(project_id: str, db: Session = Depends(get_db_session)) -> dict[str, object]:
    logger.info("Fetching project by ID: %s", project_id)
    manager = _lifecycle(db)
    return manager.serialize_project(manager.get(project_id))


@router.put("/{project_id}")
def update_project(
    project_id: str,
    payload: ProjectUpdatePayload,
    actor: ActorContext = Depends(get_actor_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    logger.info("Updating project with ID: %s", project_id)
    manager = _lifecycle(db)
    project = manager.update(
        project_id,
        ProjectUpdateData(
            name=payload.name,
            soft_delete=payload.soft_delete,
            account_id=payload.account_id,
            version=payload.version,
        ),
        actor,
    )
    return manager.serialize_project(project)


@router.patch("/{project_id}")
def partial_update_project(
    project_id: str,
    payload: ProjectPatchPayload,
    actor: ActorContext = Depends(get_actor_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    logger.info("Partially updating project with ID: %s", project_id)
    manager = _lifecycle(db)
    project = manager.partial_update(
        project_id,
        ProjectPatchData(
            name=payload.name,
            soft_delete=payload.soft_delete,
            account_id=payload.account_id,
            version=payload.version,
            created_at=payload.created_at,
            created_by=payload.created_by,
            updated_at=payload.updated_at,
            updated_by=payload.updated_by,
        ),
        actor,
    )
    return manager.serialize_project(project)


@router.delete("/{project_id}/soft")
def soft_delete_project(
    project_id: str,
    version: int | None = Query(default=None, ge=1),
    actor: ActorContext = Depends(get_actor_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    logger.info("Soft deleting project with ID: %s", project_id)
    manager = _lifecycle(db)
    return manager.serialize_project(manager.soft_delete(project_id, actor, version=version))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(project_id: str, db: Session = Depends(get_db_session)) -> Response:
    logger.info("Permanently deleting project with ID: %s", project_id)
    _lifecycle(db).hard_delete(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
