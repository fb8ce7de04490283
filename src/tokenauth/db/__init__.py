"""Database package: SQLAlchemy models and engine."""

from tokenauth.db.engine import SessionLocal, get_engine, init_db
from tokenauth.db.models import Base

__all__ = ["Base", "SessionLocal", "get_engine", "init_db"]
