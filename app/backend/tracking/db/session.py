"""Engine, session factory and transaction helpers."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from tracking.core.config import get_settings


@lru_cache
def get_engine() -> Engine:
    """Create the process-wide engine on first use."""

    settings = get_settings()
    return create_engine(settings.database_url, pool_pre_ping=True, future=True)


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, future=True)


@contextmanager
def unit_of_work(session: Session) -> Iterator[Session]:
    """Run a block as one transaction: commit on success, roll back on any error."""

    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def get_db_session() -> Iterator[Session]:
    """Request-scoped session for route dependencies; closed after the response."""

    session = get_session_factory()()
    try:
        yield session
    finally:
        session.close()
