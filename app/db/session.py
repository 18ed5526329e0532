"""Sync SQLAlchemy engine and session management."""

from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings


def _connect_args(uri: str, timeout_ms: int) -> dict:
    # statement_timeout is enforced server-side; other dialects rely on the driver default.
    if timeout_ms > 0 and uri.startswith(("postgresql", "postgres://")):
        return {"options": f"-c statement_timeout={timeout_ms}"}
    return {}


engine = create_engine(
    settings.sqlalchemy_database_uri,
    pool_pre_ping=True,
    pool_recycle=1800,
    connect_args=_connect_args(settings.sqlalchemy_database_uri, settings.store_timeout_ms),
)

SessionLocal = sessionmaker(
    bind=engine,
    class_=Session,
    expire_on_commit=False,
    autoflush=False,
)


def get_db() -> Generator[Session, None, None]:
    with SessionLocal() as db:
        yield db
