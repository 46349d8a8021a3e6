"""
db/session.py

SQLAlchemy engine and session factory for the optional metrics store.
"""

from __future__ import annotations

import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.base import Base
from db.config import resolve_database_url


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def create_db_engine(database_url: str | None = None) -> Engine | None:
    """
    Build an engine for ``database_url`` (or the configured URL).

    Returns None when no database is configured.
    """

    url = database_url or resolve_database_url()
    if not url:
        return None

    options: dict[str, object] = {"echo": _get_bool_env("SQL_ECHO", default=False)}
    if not url.startswith("sqlite"):
        options["pool_pre_ping"] = True
    return create_engine(url, **options)


def create_session_factory(engine: Engine, *, create_tables: bool = True) -> sessionmaker:
    """
    Session factory bound to ``engine``; tables are created on first use.
    """

    if create_tables:
        import db.models  # noqa: F401  registers model tables on Base.metadata

        Base.metadata.create_all(engine)
    return sessionmaker(
        bind=engine,
        class_=Session,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
