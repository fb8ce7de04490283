"""Administrative actions: service bootstrap and session timeout updates."""

from __future__ import annotations

import logging

from tokenauth.auth.service import TokenService
from tokenauth.config import get_session_timeout_override
from tokenauth.durations import parse_duration
from tokenauth.storage import SettingsStore, UserStore

logger = logging.getLogger(__name__)


def build_service(
    settings_store: SettingsStore,
    user_store: UserStore,
    **kwargs,
) -> TokenService:
    """Construct the process-wide token service from persisted settings.

    The SESSION_TIMEOUT environment variable, when set, wins over the
    stored ``user_session_timeout``. Extra keyword arguments are passed to
    TokenService (key_generator, clock).
    """
    session_timeout = get_session_timeout_override()
    if session_timeout is None:
        session_timeout = settings_store.read().user_session_timeout
    else:
        logger.info("Session timeout overridden by environment: %s", session_timeout)

    return TokenService(session_timeout, settings_store, user_store, **kwargs)


def update_session_timeout(
    service: TokenService,
    settings_store: SettingsStore,
    value: str,
) -> None:
    """Persist a new session timeout and apply it to the running service.

    Tokens already issued keep their expiry. Raises InvalidDurationError
    before anything is written when ``value`` does not parse.
    """
    duration = parse_duration(value)

    settings = settings_store.read()
    settings.user_session_timeout = value
    settings_store.write(settings)

    service.set_session_duration(duration)
