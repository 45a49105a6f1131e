"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a connection-level transaction against an in-memory
SQLite database which is rolled back afterwards, so data never leaks between
cases.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from typing import Any

import pytest
from flask import Flask
from sqlalchemy.orm import scoped_session, sessionmaker

from pageable.core.config import TestingConfig
from pageable.core.extensions import db as _db
from pageable.factory import create_app
from pageable.pagination.cache import ResolutionCache
from pageable.pagination.resolver import ColumnResolver, FieldRegistry

import tests.models  # noqa: F401  (registers tables on the metadata)
from tests.helpers.routes import bp as routes_bp


@pytest.fixture(scope="session")
def app() -> Generator[Flask, None, None]:
    """Create a Flask application configured for testing."""
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestingConfig)
    application.register_blueprint(routes_bp)
    with application.app_context():
        yield application


@pytest.fixture(scope="session")
def db(app: Flask) -> Generator[Any, None, None]:
    """Create database tables once per test session."""
    _db.create_all()
    yield _db
    _db.session.remove()
    _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a scoped session joined to a per-test outer transaction.

    ``db.session`` is swapped for the duration of the test so application
    code (repositories, views) shares the same transaction. Repositories only
    flush, so rolling back the outer transaction discards everything.
    """
    outer = connection.begin()
    scoped = scoped_session(sessionmaker(bind=connection, autoflush=False))

    original_session = db.session
    db.session = scoped
    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        outer.rollback()


@pytest.fixture()
def client(app: Flask):
    """Flask test client bound to the session-wide application."""
    return app.test_client()


@pytest.fixture()
def resolver() -> ColumnResolver:
    """Resolver with a private cache and registry."""
    return ColumnResolver(cache=ResolutionCache(), registry=FieldRegistry())


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
