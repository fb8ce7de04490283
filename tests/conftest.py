"""Shared test fixtures."""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tokenauth.auth.service import TokenService
from tokenauth.db.models import Base
from tokenauth.models import TokenData, UserRole
from tokenauth.storage.settings import SqlSettingsStore
from tokenauth.storage.users import SqlUserStore

ALICE_ID = 42
BOB_ID = 7


class FakeClock:
    """Controllable replacement for the service clock."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class KeySequence:
    """Key generator that remembers every key it hands out, in order."""

    def __init__(self) -> None:
        self.keys: list[bytes] = []

    def __call__(self, size: int) -> bytes:
        key = secrets.token_bytes(size)
        self.keys.append(key)
        return key


@pytest.fixture
def db_engine():
    """In-memory SQLite engine for tests."""
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, _connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine)


@pytest.fixture
def settings_store(session_factory):
    return SqlSettingsStore(session_factory)


@pytest.fixture
def user_store(session_factory):
    store = SqlUserStore(session_factory)
    store.create("alice", role=UserRole.ADMIN, user_id=ALICE_ID)
    store.create("bob", role=UserRole.STANDARD, user_id=BOB_ID)
    return store


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def keys():
    return KeySequence()


@pytest.fixture
def service(settings_store, user_store, clock, keys):
    """Service with a 24h session; keys.keys[0] is the default-scope secret."""
    return TokenService(
        "24h", settings_store, user_store, key_generator=keys, clock=clock,
    )


@pytest.fixture
def alice():
    return TokenData(id=ALICE_ID, username="alice", role=1, force_change_password=False)
