"""Database wiring for the Flask application."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from flask import Flask, current_app
from sqlmodel import Session

from .config import BaseConfig
from .infra.database import SessionFactory, create_db_engine, create_session_factory, init_database

EXTENSION_KEY = "hisab"


def init_db(app: Flask) -> None:
    """Create the engine for ``app`` and make sure the schema exists."""

    config: BaseConfig = app.config["HISAB_CONFIG"]
    engine = create_db_engine(config)
    init_database(engine)

    app.extensions[EXTENSION_KEY] = {
        "engine": engine,
        "session_factory": create_session_factory(engine),
    }


def get_session_factory(app: Flask | None = None) -> SessionFactory:
    """Return the transactional session factory for ``app``."""

    target = app or current_app
    state = target.extensions.get(EXTENSION_KEY)
    if state is None:  # pragma: no cover - exercised only on misconfiguration
        raise RuntimeError("Database engine not initialized")
    return state["session_factory"]


@contextmanager
def session_scope() -> Iterator[Session]:
    """Provide a transactional scope around operations for the current app."""

    with get_session_factory()() as session:
        yield session
