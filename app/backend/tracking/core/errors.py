"""Domain error taxonomy and its HTTP translation."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class TrackingError(Exception):
    """Base class for recoverable domain errors raised by services."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidIdentifierFormat(TrackingError):
    """Identifier is blank or matches neither a bare number nor an accepted code."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, raw: object) -> None:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            message = "Identifier cannot be null or blank."
        else:
            message = f"Invalid identifier format: {raw}"
        super().__init__(message)
        self.raw = raw


class NotFoundError(TrackingError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, kind: str, entity_id: object) -> None:
        super().__init__(f"{kind} not found with ID: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class DuplicateNameError(TrackingError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, kind: str, name: str, *, field: str = "name") -> None:
        super().__init__(f"A {kind.lower()} with this {field} already exists: {name}")
        self.kind = kind
        self.name = name


class ConflictError(TrackingError):
    """Write rejected because the stored state no longer matches the caller's view."""

    status_code = status.HTTP_409_CONFLICT


class DomainRuleError(TrackingError):
    """Well-formed request that breaks a domain rule (e.g. an inverted date range)."""

    status_code = status.HTTP_422_UNPROCESSABLE_CONTENT


def register_exception_handlers(app: FastAPI) -> None:
    """Translate domain errors into ``{"detail": ...}`` JSON responses."""

    @app.exception_handler(TrackingError)
    async def handle_tracking_error(request: Request, exc: TrackingError) -> JSONResponse:
        logger.info("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
