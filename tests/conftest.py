# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from murmur.core.security import issue_access_token
from murmur.db.session import Base, configure_sqlite
from murmur.db.session import get_db as app_get_session
from murmur.main import app as fastapi_app
from murmur.models import Murmur, User
from murmur.services import MurmurService, NotificationService, UserService

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "Passw0rd!"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = configure_sqlite(
        create_engine(
            TEST_DB_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
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
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that registers and commits a user."""

    def _make_user(username: str, display_name: str | None = None, **fields: object) -> User:
        user = UserService(db_session).create(
            username=username,
            email=f"{username.lower()}@example.com",
            display_name=display_name or username.title(),
            password=TEST_PASSWORD,
        )
        for key, value in fields.items():
            setattr(user, key, value)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def alice(make_user: Callable[..., User]) -> User:
    return make_user("alice", "Alice")


@pytest.fixture()
def bob(make_user: Callable[..., User]) -> User:
    return make_user("bob", "Bob")


@pytest.fixture()
def carol(make_user: Callable[..., User]) -> User:
    return make_user("carol", "Carol")


@pytest.fixture()
def make_murmur(db_session: Session) -> Callable[..., Murmur]:
    """Return a factory that publishes and commits a murmur."""

    def _make_murmur(author: User, content: str = "hello world", reply_to: Murmur | None = None) -> Murmur:
        service = MurmurService(db_session, notifications=NotificationService(db_session))
        murmur = service.create(
            author.id,
            content,
            reply_to_id=reply_to.id if reply_to is not None else None,
        )
        db_session.commit()
        return murmur

    return _make_murmur


def auth_headers_for(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_access_token(user.id)}"}


@pytest.fixture()
def alice_headers(alice: User) -> dict[str, str]:
    return auth_headers_for(alice)


@pytest.fixture()
def bob_headers(bob: User) -> dict[str, str]:
    return auth_headers_for(bob)
