"""Settings storage: database-backed persistence of the settings row."""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tokenauth.db.models import SETTINGS_ROW_ID, SettingsRow
from tokenauth.errors import StoreError
from tokenauth.models import Settings


def _row_to_settings(row: SettingsRow) -> Settings:
    return Settings(
        kube_secret_key=row.kube_secret_key,
        is_extension_client=row.is_extension_client,
        user_session_timeout=row.user_session_timeout,
    )


def _apply_settings(row: SettingsRow, settings: Settings) -> None:
    row.kube_secret_key = settings.kube_secret_key
    row.is_extension_client = settings.is_extension_client
    row.user_session_timeout = settings.user_session_timeout


class SqlSettingsStore:
    """SettingsStore over a SQLAlchemy session factory.

    A missing row reads as default ``Settings()``; the first write creates it.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def read(self) -> Settings:
        try:
            with self._session_factory() as session:
                row = session.get(SettingsRow, SETTINGS_ROW_ID)
                if row is None:
                    return Settings()
                return _row_to_settings(row)
        except SQLAlchemyError as exc:
            raise StoreError(f"failed reading settings: {exc}") from exc

    def write(self, settings: Settings) -> None:
        try:
            with self._session_factory.begin() as session:
                row = session.get(SettingsRow, SETTINGS_ROW_ID)
                if row is None:
                    row = SettingsRow(id=SETTINGS_ROW_ID)
                    session.add(row)
                _apply_settings(row, settings)
        except SQLAlchemyError as exc:
            raise StoreError(f"failed writing settings: {exc}") from exc
