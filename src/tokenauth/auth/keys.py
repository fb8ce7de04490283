"""Random signing-key generation."""

from __future__ import annotations

import logging
import secrets

logger = logging.getLogger(__name__)

SECRET_KEY_SIZE = 32


def generate_random_key(size: int = SECRET_KEY_SIZE) -> bytes | None:
    """Return ``size`` cryptographically secure random bytes, or None on failure."""
    try:
        return secrets.token_bytes(size)
    except OSError as exc:
        logger.error("Random key generation failed: %s", exc)
        return None
