"""User storage: database-backed user records."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tokenauth.db.models import UserRow
from tokenauth.errors import StoreError, UserNotFoundError
from tokenauth.models import User, UserRole

logger = logging.getLogger(__name__)


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        username=row.username,
        role=UserRole(row.role),
        token_issued_at=row.token_issued_at,
    )


class SqlUserStore:
    """UserStore over a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def read_by_id(self, user_id: int) -> User:
        try:
            with self._session_factory() as session:
                row = session.get(UserRow, user_id)
                if row is None:
                    raise UserNotFoundError(user_id)
                return _row_to_user(row)
        except SQLAlchemyError as exc:
            raise StoreError(f"failed reading user {user_id}: {exc}") from exc

    def create(
        self,
        username: str,
        role: UserRole = UserRole.STANDARD,
        user_id: int | None = None,
    ) -> User:
        """Insert a new user. The ID is auto-assigned unless given."""
        try:
            with self._session_factory.begin() as session:
                row = UserRow(
                    id=user_id, username=username, role=int(role), token_issued_at=0,
                )
                session.add(row)
                session.flush()
                user = _row_to_user(row)
        except SQLAlchemyError as exc:
            raise StoreError(f"failed creating user {username!r}: {exc}") from exc
        logger.info("User created: %s (%d)", user.username, user.id)
        return user

    def invalidate_sessions(self, user_id: int, at: datetime | None = None) -> int:
        """Reject every token issued for this user before ``at`` (default now).

        Returns the stored Unix timestamp.
        """
        at = at or datetime.now(timezone.utc)
        issued_at = int(at.timestamp())
        try:
            with self._session_factory.begin() as session:
                row = session.get(UserRow, user_id)
                if row is None:
                    raise UserNotFoundError(user_id)
                row.token_issued_at = issued_at
        except SQLAlchemyError as exc:
            raise StoreError(f"failed updating user {user_id}: {exc}") from exc
        logger.info("Sessions invalidated for user %d at %d", user_id, issued_at)
        return issued_at
