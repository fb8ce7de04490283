"""Session token service: scoped secrets, issuance, and verification.

Two signing secrets are held per service instance:

- ``Scope.DEFAULT``: regenerated on every construction and never persisted,
  so a process restart invalidates all login sessions.
- ``Scope.KUBECONFIG``: read from settings, or generated and written back
  the first time, so exported kubeconfig tokens survive restarts.

Verification first peeks at the unverified ``scope`` claim to pick the
secret, then verifies the signature, algorithm and expiry, and finally
rejects tokens issued before the user's last credential invalidation.
All verification failures surface as a single InvalidTokenError.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import jwt
from pydantic import ValidationError

from tokenauth.auth.jwt_utils import decode_claims, encode_claims, peek_scope
from tokenauth.auth.keys import SECRET_KEY_SIZE, generate_random_key
from tokenauth.durations import parse_duration
from tokenauth.errors import (
    InvalidScopeError,
    InvalidTokenError,
    SecretGenerationError,
    StoreError,
    TokenIssueError,
    TokenVerificationFailure,
)
from tokenauth.models import Claims, Scope, TokenData
from tokenauth.storage import SettingsStore, UserStore

logger = logging.getLogger(__name__)

YEAR = timedelta(days=365)
EXTENSION_CLIENT_LIFETIME = YEAR * 99

KeyGenerator = Callable[[int], bytes | None]
Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_secret(key_generator: KeyGenerator) -> bytes:
    try:
        secret = key_generator(SECRET_KEY_SIZE)
    except OSError as exc:
        raise SecretGenerationError() from exc
    if not secret:
        raise SecretGenerationError()
    return secret


class TokenService:
    """Issues and verifies HS256 session tokens for one process."""

    def __init__(
        self,
        user_session_duration: str,
        settings_store: SettingsStore,
        user_store: UserStore,
        *,
        key_generator: KeyGenerator = generate_random_key,
        clock: Clock = utcnow,
    ) -> None:
        session_timeout = parse_duration(user_session_duration)

        self._settings_store = settings_store
        self._user_store = user_store
        self._clock = clock
        self._lock = threading.Lock()
        self._session_timeout = session_timeout

        default_secret = _new_secret(key_generator)
        kube_secret = self._get_or_create_kube_secret(key_generator)
        self._secrets: dict[Scope, bytes] = {
            Scope.DEFAULT: default_secret,
            Scope.KUBECONFIG: kube_secret,
        }

    def _get_or_create_kube_secret(self, key_generator: KeyGenerator) -> bytes:
        """Return the persisted kubeconfig secret, creating it on first use."""
        settings = self._settings_store.read()
        if settings.kube_secret_key is not None:
            return settings.kube_secret_key

        kube_secret = _new_secret(key_generator)
        settings.kube_secret_key = kube_secret
        self._settings_store.write(settings)
        logger.info("Generated and stored new kubeconfig signing secret")
        return kube_secret

    # --- Runtime configuration ---

    @property
    def session_duration(self) -> timedelta:
        with self._lock:
            return self._session_timeout

    def set_session_duration(self, duration: timedelta) -> None:
        """Change the lifetime of tokens issued from now on."""
        with self._lock:
            self._session_timeout = duration
        logger.info("User session duration set to %s", duration)

    # --- Issuance ---

    def default_expires_at(self) -> datetime:
        return self._clock() + self.session_duration

    def issue_token(self, data: TokenData) -> tuple[str, datetime]:
        """Issue a default-scope session token. Returns (token, expires_at)."""
        expires_at = self.default_expires_at()
        return self.issue_scoped_token(data, Scope.DEFAULT, expires_at)

    def issue_scoped_token(
        self,
        data: TokenData,
        scope: Scope,
        expires_at: datetime | None,
    ) -> tuple[str, datetime | None]:
        """Issue a token for an explicit scope.

        ``expires_at=None`` produces a token without an ``exp`` claim. In
        extension client mode the expiry is always forced to 99 years out.
        Returns (token, expires_at) where expires_at is what the token carries.
        """
        try:
            scope = Scope(scope)
            secret = self._secrets[scope]
        except (ValueError, KeyError):
            raise InvalidScopeError(scope) from None

        try:
            settings = self._settings_store.read()
        except StoreError as exc:
            raise TokenIssueError(f"failed fetching settings from db: {exc}") from exc

        now = self._clock()
        if settings.is_extension_client:
            logger.info("Detected extension client mode, token expiry set to 99 years")
            expires_at = now + EXTENSION_CLIENT_LIFETIME

        claims = Claims(
            id=data.id,
            username=data.username,
            role=data.role,
            scope=scope,
            force_change_password=data.force_change_password,
            iat=int(now.timestamp()),
            exp=int(expires_at.timestamp()) if expires_at is not None else None,
        )

        try:
            token = encode_claims(claims, secret)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise TokenIssueError(f"failed signing token: {exc}") from exc

        if expires_at is None:
            return token, None
        return token, datetime.fromtimestamp(claims.exp, tz=timezone.utc)

    # --- Verification ---

    def verify_token(self, token: str) -> TokenData:
        """Verify a token and return its identity.

        Raises InvalidTokenError for every failure, without detail.
        """
        try:
            return self._verify(token)
        except TokenVerificationFailure as failure:
            logger.debug("Token rejected: %s", failure)
            raise InvalidTokenError() from None

    def _verify(self, token: str) -> TokenData:
        if not isinstance(token, str) or not token:
            raise TokenVerificationFailure("empty token")

        scope = peek_scope(token)
        secret = self._secrets[scope]

        try:
            claims = decode_claims(token, secret)
        except jwt.InvalidAlgorithmError as exc:
            raise TokenVerificationFailure("unexpected signing method", exc)
        except jwt.InvalidTokenError as exc:
            raise TokenVerificationFailure("signature verification failed", exc)
        except ValidationError as exc:
            raise TokenVerificationFailure("malformed claims", exc)

        if claims.scope != scope:
            raise TokenVerificationFailure(f"scope mismatch: {claims.scope.value}")

        now = int(self._clock().timestamp())
        if claims.exp is not None and now > claims.exp:
            raise TokenVerificationFailure("token expired")

        try:
            user = self._user_store.read_by_id(claims.id)
        except Exception as exc:
            raise TokenVerificationFailure("user lookup failed", exc)

        if user.token_issued_at > claims.iat:
            raise TokenVerificationFailure(
                f"token issued at {claims.iat} predates invalidation at {user.token_issued_at}"
            )

        return TokenData(
            id=claims.id,
            username=claims.username,
            role=claims.role,
            token=token,
            force_change_password=claims.force_change_password,
        )
