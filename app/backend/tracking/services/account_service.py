"""Account lifecycle service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tracking.core.actor import ActorContext
from tracking.core.errors import ConflictError, DuplicateNameError
from tracking.core.identifiers import NO_PREFIXES, Identifier, decode
from tracking.db.session import unit_of_work
from tracking.models.entities import Account
from tracking.repositories.entity_store import AccountStore
from tracking.services.integrity import assert_unique_name, clean_name, require_existing

logger = logging.getLogger(__name__)

ACCOUNT = "Account"


@dataclass(slots=True)
class AccountCreateData:
    name: str


@dataclass(slots=True)
class AccountUpdateData:
    name: str | None = None
    soft_delete: bool | None = None


class AccountService:
    """Create, update and delete accounts; projects keep their account reference valid."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.accounts = AccountStore(db)

    @staticmethod
    def serialize_account(account: Account) -> dict[str, object]:
        return {
            "id": account.id,
            "name": account.name,
            "soft_delete": account.soft_delete,
            "created_at": account.created_at.isoformat(),
            "created_by": account.created_by,
            "updated_at": account.updated_at.isoformat(),
            "updated_by": account.updated_by,
        }

    def _load(self, account_id: Identifier) -> Account:
        return require_existing(decode(account_id, NO_PREFIXES), self.accounts.find_by_id, ACCOUNT)

    def _save(self, account: Account) -> None:
        try:
            with unit_of_work(self.db):
                self.accounts.save(account)
        except IntegrityError as exc:
            raise DuplicateNameError(ACCOUNT, account.name) from exc

    def list_accounts(self) -> list[Account]:
        return self.accounts.find_all()

    def get_account(self, account_id: Identifier) -> Account:
        return self._load(account_id)

    def create_account(self, data: AccountCreateData, actor: ActorContext) -> Account:
        name = clean_name(data.name, ACCOUNT)
        assert_unique_name(name, self.accounts.exists_by_name, ACCOUNT)

        now = datetime.utcnow()
        account = Account(
            name=name,
            soft_delete=False,
            created_at=now,
            created_by=actor.name,
            updated_at=now,
            updated_by=actor.name,
        )
        self._save(account)

        self.db.refresh(account)
        logger.info("Created account %s (%s) by %s", account.id, account.name, actor.name)
        return account

    def update_account(
        self,
        account_id: Identifier,
        data: AccountUpdateData,
        actor: ActorContext,
    ) -> Account:
        """Apply the supplied fields and re-stamp. Serves both PUT and PATCH."""

        account = self._load(account_id)

        if data.name is not None:
            name = clean_name(data.name, ACCOUNT)
            if name.lower() != account.name.lower():
                assert_unique_name(
                    name,
                    lambda value: self.accounts.exists_by_name(value, exclude_id=account.id),
                    ACCOUNT,
                )
            account.name = name
        if data.soft_delete is not None:
            account.soft_delete = data.soft_delete

        account.updated_at = datetime.utcnow()
        account.updated_by = actor.name
        self._save(account)

        self.db.refresh(account)
        return account

    def soft_delete_account(self, account_id: Identifier, actor: ActorContext) -> Account:
        account = self._load(account_id)
        account.soft_delete = True
        account.updated_at = datetime.utcnow()
        account.updated_by = actor.name
        self._save(account)

        self.db.refresh(account)
        return account

    def delete_account(self, account_id: Identifier) -> None:
        with unit_of_work(self.db):
            account = self._load(account_id)
            if self.accounts.project_count(account.id) > 0:
                raise ConflictError("Cannot delete account with existing projects.")
            self.accounts.delete(account)

        logger.info("Permanently deleted account %s", account_id)
