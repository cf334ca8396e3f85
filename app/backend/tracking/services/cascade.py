"""Detach a project from every association set before it is hard-deleted."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy.orm import Session

from tracking.models.entities import Project
from tracking.repositories.entity_store import PersonStore, WeeklySummaryStore

logger = logging.getLogger(__name__)


class OwnerStore(Protocol):
    def find_owners_referencing(self, project: Project) -> list[Any]: ...

    def save_all(self, entities: list[Any]) -> list[Any]: ...


@dataclass(frozen=True, slots=True)
class ReferenceSet:
    """A collection attribute on owner rows that may contain a project."""

    name: str
    store: OwnerStore
    attribute: str


class CascadeResolver:
    """Removes inbound project references; runs inside the caller's transaction.

    Each registered reference set is handled independently: find owners, drop
    the target from their set, then batch-save them. A failure anywhere
    propagates so the caller never reaches the delete.
    """

    def __init__(self, reference_sets: list[ReferenceSet]) -> None:
        self.reference_sets = reference_sets

    @classmethod
    def for_projects(cls, db: Session) -> CascadeResolver:
        return cls(
            [
                ReferenceSet(name="person.projects", store=PersonStore(db), attribute="projects"),
                ReferenceSet(name="weekly_summary.projects", store=WeeklySummaryStore(db), attribute="projects"),
            ]
        )

    def resolve(self, target: Project) -> dict[str, int]:
        detached: dict[str, int] = {}
        for reference_set in self.reference_sets:
            owners = reference_set.store.find_owners_referencing(target)
            for owner in owners:
                collection = getattr(owner, reference_set.attribute)
                collection.remove(target)
            reference_set.store.save_all(owners)
            detached[reference_set.name] = len(owners)

        logger.info("Detached project %s from %s", target.id, detached)
        return detached
