"""Persistence interfaces the token service depends on.

The service only needs two capabilities:

    settings = settings_store.read()
    settings_store.write(settings)
    user = user_store.read_by_id(42)

SQLAlchemy implementations live in :mod:`tokenauth.storage.settings` and
:mod:`tokenauth.storage.users`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tokenauth.models import Settings, User


@runtime_checkable
class SettingsStore(Protocol):
    """Read/write access to the single persistent settings record."""

    def read(self) -> Settings: ...

    def write(self, settings: Settings) -> None: ...


@runtime_checkable
class UserStore(Protocol):
    """Read access to user records. Raises UserNotFoundError for unknown IDs."""

    def read_by_id(self, user_id: int) -> User: ...
