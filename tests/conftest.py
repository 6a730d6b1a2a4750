"""Shared fixtures for the API and client test suites."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest

TEST_DB_PATH = Path(tempfile.gettempdir()) / "kost_console_test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "30")
os.environ.setdefault("APP_TIMEZONE", "Asia/Jakarta")


@pytest.fixture()
def database() -> Iterator[None]:
    """Recreate every table so each test starts from an empty database."""

    from kost_console.infrastructure import database as db_module
    from kost_console.infrastructure import models  # noqa: F401

    db_module.Base.metadata.drop_all(bind=db_module.engine, checkfirst=True)
    db_module.Base.metadata.create_all(bind=db_module.engine)
    yield
    db_module.Base.metadata.drop_all(bind=db_module.engine, checkfirst=True)


@pytest.fixture()
def db_session(database):
    from kost_console.infrastructure.database import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def admin_user(db_session):
    from kost_console.application.use_cases import create_user
    from kost_console.domain.entities import ROLE_ADMIN

    return create_user(
        db_session,
        name="Ibu Kost",
        email="admin@kost.test",
        password="Rahasia123",
        role_alias=ROLE_ADMIN,
    )


@pytest.fixture()
def member_user(db_session):
    from kost_console.application.use_cases import create_user

    return create_user(
        db_session,
        name="Budi Santoso",
        email="budi@kost.test",
        password="Rahasia123",
        phone="081234567890",
    )


def _make_token(email: str) -> str:
    from kost_console.infrastructure.security import create_access_token

    return create_access_token({"sub": email})


@pytest.fixture()
def make_token():
    return _make_token


@pytest.fixture()
def auth_headers():
    def _headers(email: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {_make_token(email)}"}

    return _headers


@pytest.fixture()
def client(database):
    """Return a test client bound to a fresh application instance."""

    from fastapi.testclient import TestClient

    from main import create_app

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
