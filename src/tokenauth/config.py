"""Environment-driven configuration."""

from __future__ import annotations

import os


def is_dev_mode() -> bool:
    return os.environ.get("ENVIRONMENT", "development") != "production"


def get_data_dir() -> str:
    return os.environ.get("DATA_DIR", "data")


def get_database_url() -> str:
    """Return the database URL.

    Defaults:
      - ENVIRONMENT=development → sqlite:///$DATA_DIR/tokenauth.db
      - ENVIRONMENT=production  → DATABASE_URL env var (required)
    """
    db_url = os.environ.get("DATABASE_URL")
    if db_url:
        return db_url
    if not is_dev_mode():
        raise ValueError("DATABASE_URL environment variable must be set in production")
    data_dir = get_data_dir()
    os.makedirs(data_dir, exist_ok=True)
    return f"sqlite:///{data_dir}/tokenauth.db"


def get_session_timeout_override() -> str | None:
    """Session timeout forced through SESSION_TIMEOUT, or None to use settings."""
    value = os.environ.get("SESSION_TIMEOUT", "").strip()
    return value or None
