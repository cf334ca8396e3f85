"""Existence and uniqueness checks run before any state change."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from tracking.core.errors import DomainRuleError, DuplicateNameError, NotFoundError

EntityT = TypeVar("EntityT")


def clean_name(name: str, kind: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise DomainRuleError(f"{kind} name cannot be blank.")
    return cleaned


def assert_unique_name(name: str, exists_by_name: Callable[[str], bool], kind: str) -> None:
    if exists_by_name(name):
        raise DuplicateNameError(kind, name.strip())


def require_existing(entity_id: int, lookup: Callable[[int], EntityT | None], kind: str) -> EntityT:
    entity = lookup(entity_id)
    if entity is None:
        raise NotFoundError(kind, entity_id)
    return entity


def require_all(
    entity_ids: list[int],
    lookup_many: Callable[[list[int]], list[EntityT]],
    kind: str,
) -> list[EntityT]:
    """Load every id in order, dropping repeats; the first unknown id fails the whole batch."""

    ids = list(dict.fromkeys(entity_ids))
    found = {entity.id: entity for entity in lookup_many(ids)}
    for entity_id in ids:
        if entity_id not in found:
            raise NotFoundError(kind, entity_id)
    return [found[entity_id] for entity_id in ids]
