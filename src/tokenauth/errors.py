"""Exception types raised by the token service and its stores."""

from __future__ import annotations


class TokenAuthError(Exception):
    """Base class for all tokenauth errors."""


class InvalidDurationError(TokenAuthError, ValueError):
    """A session duration string could not be parsed."""


class SecretGenerationError(TokenAuthError):
    def __init__(self, message: str = "Unable to generate secret key") -> None:
        super().__init__(message)


class StoreError(TokenAuthError):
    """Settings or user persistence failed."""


class UserNotFoundError(StoreError):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class InvalidScopeError(TokenAuthError, ValueError):
    def __init__(self, scope: object) -> None:
        super().__init__(f"invalid scope: {scope}")
        self.scope = scope


class TokenIssueError(TokenAuthError):
    """Signing a token failed (settings unavailable or encoder error)."""


class InvalidTokenError(TokenAuthError):
    """The only error verification exposes to callers.

    Carries no detail about why the token was rejected.
    """

    def __init__(self) -> None:
        super().__init__("Invalid JWT token")


class TokenVerificationFailure(Exception):
    """Internal rejection record: the real reason a token failed.

    Logged for diagnostics, then replaced by :class:`InvalidTokenError`
    before it reaches the caller.
    """

    def __init__(self, reason: str, cause: BaseException | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.reason
        return f"{self.reason}: {self.cause}"
