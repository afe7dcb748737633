"""Pytest configuration and shared fixtures for HabitStreak tests.

Provides an isolated SQLite database per test, both habit stores, factories
for habits and completions, and a Flask test client.
"""

from __future__ import annotations

import tempfile
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Iterable

import pytest
from sqlmodel import Session, SQLModel, create_engine, select

from habitstreak import create_app
from habitstreak.config import TestConfig
from habitstreak.infra.database import create_session_factory
from habitstreak.infra.repositories import InMemoryHabitRepository, SQLModelHabitRepository
from habitstreak.models import Habit, HabitCompletion, User

D = date(2024, 3, 10)
"""Reference day used by scenario tests."""


def at_noon(day: date) -> datetime:
    return datetime.combine(day, time(12, 0), tzinfo=timezone.utc)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Session for arranging test data directly."""
    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the one the app builds."""
    return create_session_factory(db_engine)


@pytest.fixture
def user(db_session) -> User:
    """Create a default user for scoping data."""

    existing = db_session.exec(select(User).where(User.username == "tester")).first()
    if existing:
        return existing
    u = User(username="tester")
    db_session.add(u)
    db_session.commit()
    db_session.refresh(u)
    return u


@pytest.fixture
def other_user(db_session) -> User:
    u = User(username="someone-else")
    db_session.add(u)
    db_session.commit()
    db_session.refresh(u)
    return u


# =============================================================================
# Stores
# =============================================================================


@pytest.fixture
def sql_repo(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)


@pytest.fixture
def memory_repo() -> InMemoryHabitRepository:
    return InMemoryHabitRepository()


@pytest.fixture(params=["sql", "memory"])
def repository(request, user):
    """Each store in turn, so service behavior is checked against both."""

    if request.param == "sql":
        return request.getfixturevalue("sql_repo")
    return request.getfixturevalue("memory_repo")


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory(db_session, user):
    """Factory for habits persisted through the test session."""

    def _create_habit(
        title: str = "Test Habit",
        *,
        created_on: date = D,
        is_active: bool = True,
        sort_order: int = 0,
        owner: User | None = None,
    ) -> Habit:
        owner = owner or user
        habit = Habit(
            user_id=owner.id,
            title=title,
            is_active=is_active,
            sort_order=sort_order,
            created_at=at_noon(created_on),
            updated_at=at_noon(created_on),
        )
        db_session.add(habit)
        db_session.commit()
        db_session.refresh(habit)
        return habit

    return _create_habit


@pytest.fixture
def completion_factory(db_session):
    """Factory adding completions for a habit on the given days."""

    def _add(habit: Habit, days: Iterable[date]) -> list[HabitCompletion]:
        rows = [HabitCompletion.for_day(habit.id, day, at_noon(day)) for day in days]
        db_session.add_all(rows)
        db_session.commit()
        return rows

    return _add


@pytest.fixture
def store_habit(repository, user):
    """Create a habit through whichever store ``repository`` is."""

    def _create(title: str = "Read", *, created_on: date = D, owner_id: int | None = None) -> Habit:
        habit = Habit(
            user_id=owner_id or user.id,
            title=title,
            sort_order=repository.next_sort_order(user_id=owner_id or user.id),
            created_at=at_noon(created_on),
            updated_at=at_noon(created_on),
        )
        return repository.create_habit(habit, user_id=owner_id or user.id)

    return _create


# =============================================================================
# Flask
# =============================================================================


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("HABITSTREAK_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("HABITSTREAK_STORE", raising=False)
    application = create_app(config=TestConfig())
    application.config.update(TESTING=True)
    return application


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client
