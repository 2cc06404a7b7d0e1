# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import timedelta
from itertools import count
from typing import Any

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from civictrack.core.security import create_access_token
from civictrack.db.session import Base
from civictrack.db.session import get_db as app_get_session
from civictrack.db.time import utcnow
from civictrack.main import app as fastapi_app
from civictrack.models import Issue, IssueCategory, User
from civictrack.schemas.issue import IssueCreate
from civictrack.services.issue_store import IssueStore
from civictrack.services.uploads import UploadStore, get_upload_store

TEST_DB_URL = "sqlite://"

SF_LAT = 37.7749
SF_LNG = -122.4194

_USER_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def upload_store(app: FastAPI, tmp_path: Any) -> Iterator[UploadStore]:
    """Route photo uploads into a per-test temporary directory."""
    store = UploadStore(tmp_path / "uploads")
    app.dependency_overrides[get_upload_store] = lambda: store
    try:
        yield store
    finally:
        app.dependency_overrides.pop(get_upload_store, None)


@pytest.fixture()
def client(app: FastAPI, upload_store: UploadStore) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _make_user(db: Session, *, is_admin: bool = False, is_banned: bool = False) -> User:
    n = next(_USER_COUNTER)
    user = User(
        id=f"user-{n}",
        email=f"user{n}@example.org",
        first_name="Test",
        last_name=f"User {n}",
        is_admin=is_admin,
        is_banned=is_banned,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def user_factory(db_session: Session) -> Callable[..., User]:
    """Create persisted users on demand."""

    def _factory(**kwargs: Any) -> User:
        return _make_user(db_session, **kwargs)

    return _factory


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """A regular citizen account."""
    return _make_user(db_session)


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """A second citizen account."""
    return _make_user(db_session)


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    """An administrator account."""
    return _make_user(db_session, is_admin=True)


@pytest.fixture()
def banned_user(db_session: Session) -> User:
    """A citizen who may no longer report issues."""
    return _make_user(db_session, is_banned=True)


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return auth_headers(other_user)


@pytest.fixture()
def admin_auth_token(admin_user: User) -> dict[str, str]:
    """Return authorization headers for the administrator."""
    return auth_headers(admin_user)


@pytest.fixture()
def issue_factory(db_session: Session, test_user: User) -> Callable[..., Issue]:
    """Create issues through the store; ``age_minutes`` backdates them."""

    def _factory(
        *,
        latitude: float = SF_LAT,
        longitude: float = SF_LNG,
        category: IssueCategory = IssueCategory.ROADS,
        title: str = "Pothole on Market St",
        reporter: User | None = None,
        age_minutes: int = 0,
        **kwargs: Any,
    ) -> Issue:
        data = IssueCreate(
            title=title,
            description="Deep pothole in the right lane",
            category=category,
            latitude=latitude,
            longitude=longitude,
            **kwargs,
        )
        issue = IssueStore(db_session).create(data, reporter or test_user)
        if age_minutes:
            issue.created_at = utcnow() - timedelta(minutes=age_minutes)
            db_session.commit()
        return issue

    return _factory


@pytest.fixture()
def test_issue(issue_factory: Callable[..., Issue]) -> Issue:
    """A baseline visible issue in San Francisco."""
    return issue_factory()
