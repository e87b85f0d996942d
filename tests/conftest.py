"""Pytest fixtures for the alumni hub tests.

Provides:
- engine: clean file-backed SQLite database for each test
- session_factory / db: sessions bound to that database
- make_user / actor_of: users with roles (password PASSWORD) and the Actor built from them
- client / auth_headers: FastAPI TestClient wired to the test database
"""

import os
import tempfile
from datetime import timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from alumni_hub.core.security import create_access_token, get_password_hash
from alumni_hub.core.utils import utcnow
from alumni_hub.db.models.event import Event
from alumni_hub.db.models.user import User
from alumni_hub.db.session import create_db_engine, create_tables, get_db, get_session_factory
from alumni_hub.main import app
from alumni_hub.schemas.actor import Actor
from alumni_hub.schemas.enums import EventStatusEnum

PASSWORD = "correct-horse-battery"
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture(scope="function")
def engine():
    """
    Fresh database per test. A file rather than :memory: so that threads
    with their own connections see the same data.
    """
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    engine = create_db_engine(f"sqlite:///{db_path}", echo=False)
    create_tables(engine)

    yield engine

    engine.dispose()
    if Path(db_path).exists():
        os.unlink(db_path)


@pytest.fixture(scope="function")
def session_factory(engine):
    return get_session_factory(engine)


@pytest.fixture(scope="function")
def db(session_factory):
    session = session_factory()

    yield session

    session.rollback()
    session.close()


@pytest.fixture
def make_user(db):
    """Factory creating committed users; roles default to none."""
    counter = {"n": 0}

    def _make_user(username: str = None, roles=None, is_active: bool = True) -> User:
        counter["n"] += 1
        user = User(
            username=username or f"alum{counter['n']}",
            full_name=f"Alum {counter['n']}",
            hashed_password=PASSWORD_HASH,
            roles=list(roles or []),
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def actor_of():
    def _actor_of(user: User) -> Actor:
        return Actor(id=user.id, roles=frozenset(user.roles or []))

    return _actor_of


@pytest.fixture
def make_event(db, make_user):
    """Factory for published events with optional capacity and deadlines."""

    def _make_event(organizer: User = None, **overrides) -> Event:
        organizer = organizer or make_user()
        values = {
            "title": "Homecoming",
            "status": EventStatusEnum.PUBLISHED,
            "starts_at": utcnow() + timedelta(days=30),
            "attendee_count": 0,
        }
        values.update(overrides)
        event = Event(organizer_id=organizer.id, **values)
        db.add(event)
        db.commit()
        return event

    return _make_event


@pytest.fixture
def client(session_factory):
    """
    TestClient with get_db pointed at the test database.
    Not used as a context manager, so the app lifespan does not touch the default database.
    """
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict:
        token = create_access_token(data={"sub": user.username, "user_id": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def user_password():
    """Plain-text password of every user built by make_user."""
    return PASSWORD
