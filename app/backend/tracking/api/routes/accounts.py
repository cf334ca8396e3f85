"""Account endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, StringConstraints
from sqlalchemy.orm import Session

from tracking.core.actor import ActorContext, get_actor_context
from tracking.db.session import get_db_session
from tracking.services.account_service import AccountCreateData, AccountService, AccountUpdateData

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts", tags=["accounts"])

# Checked after trimming, so whitespace-only names are rejected.
EntityName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class AccountCreatePayload(BaseModel):
    name: EntityName


class AccountUpdatePayload(BaseModel):
    name: EntityName
    soft_delete: bool | None = None


class AccountPatchPayload(BaseModel):
    name: EntityName | None = None
    soft_delete: bool | None = None


def _account_service(db: Session) -> AccountService:
    return AccountService(db)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_account(
    payload: AccountCreatePayload,
    actor: ActorContext = Depends(get_actor_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    logger.info("Creating new account with name: %s", payload.name)
    service = _account_service(db)
    account = service.create_account(AccountCreateData(name=payload.name), actor)
    return service.serialize_account(account)


@router.get("")
def list_accounts(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _account_service(db)
    return {"items": [service.serialize_account(account) for account in service.list_accounts()]}


@router.get("/{account_id}")
def get_account(account_id: str, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _account_service(db)
    return service.serialize_account(service.get_account(account_id))


@router.put("/{account_id}")
def update_account(
    account_id: str,
    payload: AccountUpdatePayload,
    actor: ActorContext = Depends(get_actor_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    logger.info("Updating account with ID: %s", account_id)
    service = _account_service(db)
    account = service.update_account(
        account_id,
        AccountUpdateData(name=payload.name, soft_delete=payload.soft_delete),
        actor,
    )
    return service.serialize_account(account)


@router.patch("/{account_id}")
def partial_update_account(
    account_id: str,
    payload: AccountPatchPayload,
    actor: ActorContext = Depends(get_actor_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    logger.info("Partially updating account with ID: %s", account_id)
    service = _account_service(db)
    account = service.update_account(
        account_id,
        AccountUpdateData(name=payload.name, soft_delete=payload.soft_delete),
        actor,
    )
    return service.serialize_account(account)


@router.delete("/{account_id}/soft")
def soft_delete_account(
    account_id: str,
    actor: ActorContext = Depends(get_actor_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    logger.info("Soft deleting account with ID: %s", account_id)
    service = _account_service(db)
    return service.serialize_account(service.soft_delete_account(account_id, actor))


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(account_id: str, db: Session = Depends(get_db_session)) -> Response:
    logger.info("Permanently deleting account with ID: %s", account_id)
    _account_service(db).delete_account(account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
