from __future__ import annotations

import logging
import typing as t

from flask import Flask
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool


logger = logging.getLogger(__name__)

Base = declarative_base()

_engine: Engine | None = None
SessionLocal: scoped_session = scoped_session(
    sessionmaker(autocommit=False, autoflush=False)
)


def get_engine() -> Engine:
    """
    Return the global SQLAlchemy engine.

    This expects that ``init_db(app)`` has been called during application
    startup to configure the engine from Flask config.
    """
    if _engine is None:
        raise RuntimeError("Database engine is not initialized. Call init_db(app) first.")
    return t.cast(Engine, _engine)


def _engine_options(database_uri: str) -> dict[str, t.Any]:
    # In-memory SQLite lives inside a single connection; share it across sessions.
    if database_uri.startswith("sqlite") and ":memory:" in database_uri:
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    if database_uri.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {}


def init_db(app: Flask) -> None:
    """
    Initialize the SQLAlchemy engine and session factory for the Flask app.

    Reads the database URL from ``app.config['SQLALCHEMY_DATABASE_URI']`` and
    creates the ``pastes`` table if it does not exist yet.
    """
    global _engine

    database_uri = app.config.get("SQLALCHEMY_DATABASE_URI")
    if not database_uri:
        raise RuntimeError(
            "SQLALCHEMY_DATABASE_URI is not configured on the Flask app."
        )

    close_db()
    _engine = create_engine(
        database_uri,
        echo=app.config.get("SQLALCHEMY_ECHO", False),
        **_engine_options(database_uri),
    )
    SessionLocal.configure(bind=_engine)

    # Import models so that Base.metadata is populated before create_all.
    from pastebox.domain import models as _models  # noqa: F401

    Base.metadata.create_all(_engine)

    @app.teardown_appcontext
    def remove_session(_exc: BaseException | None) -> None:  # type: ignore[unused-variable]
        """Remove the scoped session at the end of the request."""

        SessionLocal.remove()


def close_db() -> None:
    """Release pooled connections. Safe to call more than once."""
    global _engine

    SessionLocal.remove()
    if _engine is not None:
        _engine.dispose()
        logger.info("Database engine disposed", extra={"event": "db_closed"})
        _engine = None
