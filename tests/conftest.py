"""Shared fixtures for the Peniel test suite.

Stores are built on a fixed clock so seeded event dates (one, two and five
days out) and birthday distances are deterministic.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime

import pytest

from peniel.core.models import Event, Role, User
from peniel.core.store import AppStore
from peniel.core.sessions import set_session_context
from peniel.notifications import Notifier

# Tuesday afternoon, UTC.
NOW = datetime(2026, 3, 10, 15, 0, tzinfo=UTC)


def fixed_clock(now: datetime = NOW) -> Callable[[], datetime]:
    return lambda: now


def make_user(
    user_id: str,
    *,
    name: str | None = None,
    email: str | None = None,
    birth_date: date = date(1990, 6, 1),
    role: Role = Role.MEMBER,
    sector_ids: tuple[str, ...] = (),
) -> User:
    return User(
        id=user_id,
        name=name or f"User {user_id}",
        email=email or f"{user_id}@igreja.com",
        birth_date=birth_date,
        role=role,
        sector_ids=frozenset(sector_ids),
    )


def make_event(
    event_id: str,
    when: datetime,
    *,
    sector_id: str = "global",
    title: str | None = None,
    created_by: str = "u1",
) -> Event:
    return Event(
        id=event_id,
        title=title or f"Event {event_id}",
        date=when,
        sector_id=sector_id,
        created_by=created_by,
    )


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def store(notifier: Notifier) -> AppStore:
    """A freshly seeded store on the fixed clock, nobody logged in."""
    return AppStore.seeded(notifier=notifier, clock=fixed_clock())


@pytest.fixture
def carlos_store(store: AppStore) -> AppStore:
    """Seeded store with Pr. Carlos (leader of every sector) logged in."""
    assert store.login("carlos@igreja.com")
    return store


@pytest.fixture
def ana_store(store: AppStore) -> AppStore:
    """Seeded store with Ana (member of sector 1) logged in."""
    assert store.login("ana@igreja.com")
    return store


@pytest.fixture
def joao_store(store: AppStore) -> AppStore:
    """Seeded store with João (leader of sector 2 only) logged in."""
    assert store.login("joao@igreja.com")
    return store


@pytest.fixture(autouse=True)
def _clean_session_context():
    """Reset the session ContextVar between tests."""
    set_session_context(None)
    yield
    set_session_context(None)
