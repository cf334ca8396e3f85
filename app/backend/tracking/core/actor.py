"""Acting identity used for audit stamping."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Header

from tracking.core.config import get_settings


@dataclass(frozen=True)
class ActorContext:
    """Caller on whose behalf audit fields are stamped.

    ``display_name`` is ``None`` for unauthenticated callers; such writes are
    attributed to the configured system actor.
    """

    display_name: str | None = None

    @property
    def name(self) -> str:
        if self.display_name and self.display_name.strip():
            return self.display_name.strip()
        return get_settings().system_actor_name


def _compose_display_name(first_name: str | None, last_name: str | None) -> str | None:
    parts = [part.strip() for part in (first_name, last_name) if part and part.strip()]
    return " ".join(parts) or None


def get_actor_context(
    x_actor_name: str | None = Header(default=None, alias="X-ACTOR-NAME"),
    x_actor_first_name: str | None = Header(default=None, alias="X-ACTOR-FIRST-NAME"),
    x_actor_last_name: str | None = Header(default=None, alias="X-ACTOR-LAST-NAME"),
) -> ActorContext:
    """Resolve the acting identity from trusted proxy headers.

    ``X-ACTOR-NAME`` wins; otherwise first and last name are joined. No
    headers at all yields the system actor.
    """

    if x_actor_name and x_actor_name.strip():
        return ActorContext(display_name=x_actor_name.strip())
    return ActorContext(display_name=_compose_display_name(x_actor_first_name, x_actor_last_name))
