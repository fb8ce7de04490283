"""SQLAlchemy ORM models for settings and users."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, LargeBinary, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from tokenauth.models import DEFAULT_SESSION_TIMEOUT, UserRole

SETTINGS_ROW_ID = 1


class Base(DeclarativeBase):
    pass


class SettingsRow(Base):
    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SETTINGS_ROW_ID)
    kube_secret_key: Mapped[bytes | None] = mapped_column(
        LargeBinary, nullable=True, default=None
    )
    is_extension_client: Mapped[bool] = mapped_column(Boolean, default=False)
    user_session_timeout: Mapped[str] = mapped_column(
        String(32), default=DEFAULT_SESSION_TIMEOUT
    )


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(256), unique=True, index=True)
    role: Mapped[int] = mapped_column(Integer, default=int(UserRole.STANDARD))
    token_issued_at: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
