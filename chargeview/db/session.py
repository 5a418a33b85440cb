"""Engine and session factory for the charging database."""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Engine, create_engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from chargeview.core.config import get_settings
from chargeview.obs import instrument_sqlalchemy_engine


def connect_args_for(database_url: str) -> dict[str, Any]:
    """Driver arguments so every connection works in UTC and can cross threads."""

    backend = make_url(database_url).get_backend_name()
    if backend == "sqlite":
        # request threads share the engine with the streaming CSV response
        return {"check_same_thread": False}
    if backend == "postgresql":
        # date() of a timestamptz follows the session zone; calendar filters are UTC
        return {"options": "-c timezone=UTC"}
    return {}


def build_engine(database_url: str, *, instrument: bool = False) -> Engine:
    """Create an engine for ``database_url``, traced when ``instrument`` is set."""

    engine = create_engine(
        database_url, pool_pre_ping=True, connect_args=connect_args_for(database_url)
    )
    if instrument:
        instrument_sqlalchemy_engine(engine)
    return engine


settings = get_settings()
engine = build_engine(settings.database_url, instrument=settings.enable_tracing)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Provide a transactional scope for scripts that write to the database."""
    session: Session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = ["SessionLocal", "build_engine", "connect_args_for", "engine", "session_scope"]
