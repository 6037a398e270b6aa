# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("PASSWORD_HASH_TIME_COST", "1")
os.environ.setdefault("PASSWORD_HASH_MEMORY_KIB", "8")
os.environ.setdefault("PASSWORD_HASH_PARALLELISM", "1")
os.environ.pop("REDIS_URL", None)

from quorum.core.security import create_access_token, hash_password
from quorum.db.session import Base
from quorum.db.session import get_db as app_get_session
from quorum.main import app as fastapi_app
from quorum.models import Answer, Question, User
from quorum.models.user import ROLE_ADMIN, ROLE_BANNED, ROLE_USER
from quorum.services.kvstore import KeyValueStore
from quorum.services.session import Identity, SessionContext

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "secret123"

_USER_COUNTER = count(1)
# Fixed base so created_at ordering is deterministic across fixtures.
BASE_TIME = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


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
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

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


@pytest.fixture(autouse=True)
def clear_kv_store() -> Iterator[None]:
    """Admin session flags live in process memory during tests."""
    KeyValueStore.clear_memory()
    yield
    KeyValueStore.clear_memory()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting members with the shared test password."""

    def _make_user(
        username: str | None = None,
        *,
        role: str = ROLE_USER,
        reputation: int = 0,
    ) -> User:
        number = next(_USER_COUNTER)
        name = username or f"member{number}"
        user = User(
            username=name,
            email=f"{name}@example.com",
            password_hash=hash_password(TEST_PASSWORD),
            role=role,
            reputation=reputation,
            created_at=BASE_TIME + timedelta(seconds=number),
        )
        db_session.add(user)
        db_session.flush()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return the primary test member."""
    return make_user("alice")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    return make_user("bob")


@pytest.fixture()
def admin_user(make_user: Callable[..., User]) -> User:
    return make_user("root", role=ROLE_ADMIN)


@pytest.fixture()
def banned_user(make_user: Callable[..., User]) -> User:
    return make_user("mallory", role=ROLE_BANNED)


def bearer(user: User) -> dict[str, str]:
    """Return authorization headers for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test member."""
    return bearer(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    return bearer(other_user)


@pytest.fixture()
def admin_auth_token(admin_user: User) -> dict[str, str]:
    return bearer(admin_user)


@pytest.fixture()
def banned_auth_token(banned_user: User) -> dict[str, str]:
    return bearer(banned_user)


def session_for(user: User | None) -> SessionContext:
    return SessionContext(Identity.from_user(user) if user is not None else None)


@pytest.fixture()
def make_question(db_session: Session) -> Callable[..., Question]:
    """Return a factory for questions with increasing ``created_at``."""
    counter = count(1)

    def _make_question(
        author: User,
        *,
        title: str | None = None,
        description: str = "A description that is long enough to be valid.",
        tags: list[str] | None = None,
        vote_count: int = 0,
        answer_count: int = 0,
        minutes: int | None = None,
    ) -> Question:
        number = next(counter)
        created = BASE_TIME + timedelta(minutes=minutes if minutes is not None else number)
        question = Question(
            title=title or f"How do I solve problem number {number}?",
            description=description,
            author_id=author.id,
            vote_count=vote_count,
            answer_count=answer_count,
            created_at=created,
            updated_at=created,
        )
        question.tags = tags or ["python"]
        db_session.add(question)
        db_session.flush()
        db_session.refresh(question)
        return question

    return _make_question


@pytest.fixture()
def test_question(make_question: Callable[..., Question], test_user: User) -> Question:
    """A question asked by the primary test member."""
    return make_question(test_user, title="How do I reverse a list in Python?")


@pytest.fixture()
def make_answer(db_session: Session) -> Callable[..., Answer]:
    counter = count(1)

    def _make_answer(question: Question, author: User, content: str = "Use reversed().") -> Answer:
        created = BASE_TIME + timedelta(hours=1, minutes=next(counter))
        answer = Answer(
            question_id=question.id,
            content=content,
            author_id=author.id,
            created_at=created,
            updated_at=created,
        )
        db_session.add(answer)
        question.answer_count += 1
        db_session.flush()
        db_session.refresh(answer)
        return answer

    return _make_answer


@pytest.fixture()
def test_answer(make_answer: Callable[..., Answer], test_question: Question, other_user: User) -> Answer:
    """An answer by the secondary member to the primary member's question."""
    return make_answer(test_question, other_user)
