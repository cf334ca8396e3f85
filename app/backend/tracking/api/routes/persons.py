"""Person endpoints, including project tagging and role lookups."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field, StringConstraints
from sqlalchemy.orm import Session

from tracking.db.session import get_db_session
from tracking.models.entities import Role, TechStack
from tracking.services.person_service import PersonCreateData, PersonService, PersonUpdateData

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/persons", tags=["persons"])

PersonName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=128)]


class PersonCreatePayload(BaseModel):
    first_name: PersonName
    last_name: PersonName
    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    role: Role = Role.EMPLOYEE
    tech_stack: TechStack | None = None
    project_ids: list[int | str] = Field(default_factory=list)


class PersonUpdatePayload(BaseModel):
    first_name: PersonName | None = None
    last_name: PersonName | None = None
    email: str | None = Field(default=None, min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    role: Role | None = None
    tech_stack: TechStack | None = None
    project_ids: list[int | str] | None = None


class ProjectTagPayload(BaseModel):
    project_ids: list[int | str] = Field(min_length=1)


def _person_service(db: Session) -> PersonService:
    return PersonService(db)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_person(payload: PersonCreatePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    logger.info("Creating new person: %s", payload.first_name)
    service = _person_service(db)
    person = service.create_person(
        PersonCreateData(
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
            role=payload.role,
            tech_stack=payload.tech_stack,
            project_ids=payload.project_ids,
        )
    )
    return service.serialize_person(person)


@router.get("")
def list_persons(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _person_service(db)
    return {"items": [service.serialize_person(person) for person in service.list_persons()]}


@router.get("/search")
def search_persons(
    name: str = Query(min_length=1),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    logger.info("Searching for person(s) by name: %s", name)
    service = _person_service(db)
    return {"items": [service.serialize_person(person) for person in service.search_persons(name)]}


@router.get("/role/{role}")
def list_persons_by_role(role: str, db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    try:
        parsed_role = Role(role.strip().lower())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid role: {role}") from exc

    service = _person_service(db)
    return {"items": [service.serialize_person(person) for person in service.list_persons_by_role(parsed_role)]}


@router.get("/project/{project_id}")
def list_persons_by_project(project_id: str, db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    logger.info("Fetching persons tagged to project ID: %s", project_id)
    service = _person_service(db)
    return {"items": [service.serialize_person(person) for person in service.list_persons_by_project(project_id)]}


@router.get("/{person_id}")
def get_person(person_id: str, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _person_service(db)
    return service.serialize_person(service.get_person(person_id))


@router.put("/{person_id}")
def update_person(
    person_id: str,
    payload: PersonUpdatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    logger.info("Updating person with ID: %s", person_id)
    service = _person_service(db)
    person = service.update_person(
        person_id,
        PersonUpdateData(
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
            role=payload.role,
            tech_stack=payload.tech_stack,
            project_ids=payload.project_ids,
        ),
    )
    return service.serialize_person(person)


@router.post("/{person_id}/projects")
def tag_projects(
    person_id: str,
    payload: ProjectTagPayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    logger.info("Tagging projects to person with ID: %s", person_id)
    service = _person_service(db)
    return service.serialize_person(service.tag_projects(person_id, payload.project_ids))


@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_person(person_id: str, db: Session = Depends(get_db_session)) -> Response:
    logger.info("Deleting person with ID: %s", person_id)
    _person_service(db).delete_person(person_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
