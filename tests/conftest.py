# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator

import pytest

os.environ.setdefault("SECRET_KEY", "postbox-test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from postbox.core.security import create_access_token
from postbox.db.session import Base
from postbox.db.session import get_db as app_get_session
from postbox.main import app as fastapi_app
from postbox.models import User
from postbox.repositories import NoticeRepository, ThreadRepository, UserRepository
from postbox.repositories.user_repo import nicename_for
from postbox.services import HookRegistry, MessageService

TEST_DB_URL = "sqlite://"


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
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
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
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def make_user(
    db: Session,
    login: str,
    *,
    user_id: int | None = None,
    nicename: str | None = None,
    is_moderator: bool = False,
) -> User:
    """Persist a user, optionally with a fixed primary key."""
    user = User(
        user_login=login,
        user_nicename=nicename or nicename_for(login),
        display_name=login.title(),
        is_moderator=is_moderator,
    )
    if user_id is not None:
        user.id = user_id
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def alice(db_session: Session) -> User:
    return make_user(db_session, "alice")


@pytest.fixture()
def bob(db_session: Session) -> User:
    return make_user(db_session, "bob")


@pytest.fixture()
def carol(db_session: Session) -> User:
    return make_user(db_session, "carol")


@pytest.fixture()
def moderator(db_session: Session) -> User:
    return make_user(db_session, "mod", is_moderator=True)


@pytest.fixture()
def hook_registry() -> HookRegistry:
    """Return an isolated hook registry so tests never leak hooks."""
    return HookRegistry()


@pytest.fixture()
def message_service(db_session: Session, hook_registry: HookRegistry) -> MessageService:
    return MessageService(
        threads=ThreadRepository(db_session),
        users=UserRepository(db_session),
        notices=NoticeRepository(db_session),
        hooks=hook_registry,
        username_compatibility_mode=False,
        default_subject="No Subject",
        reply_prefix="Re: ",
    )


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def alice_auth(alice: User) -> dict[str, str]:
    return auth_headers(alice)


@pytest.fixture()
def bob_auth(bob: User) -> dict[str, str]:
    return auth_headers(bob)
