"""Pydantic data models for token claims, settings, and users."""

from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SESSION_TIMEOUT = "8h"


class Scope(str, Enum):
    """Token scope identifiers. Each scope is signed with its own secret."""

    DEFAULT = "default"
    KUBECONFIG = "kubeconfig"


class UserRole(IntEnum):
    ADMIN = 1
    STANDARD = 2


class Claims(BaseModel):
    """JWT payload. Serialized with the wire names (``forceChangePassword``)."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    username: str
    role: int
    scope: Scope = Scope.DEFAULT
    force_change_password: bool = Field(default=False, alias="forceChangePassword")
    iat: int
    exp: int | None = None  # None: never expires

    def to_payload(self) -> dict:
        """Return the JSON payload, omitting ``exp`` for non-expiring tokens."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TokenData(BaseModel):
    """Identity carried by a session token."""

    id: int
    username: str
    role: int
    token: str = ""
    force_change_password: bool = False


class Settings(BaseModel):
    """Persistent application settings relevant to token handling."""

    kube_secret_key: bytes | None = None
    is_extension_client: bool = False
    user_session_timeout: str = DEFAULT_SESSION_TIMEOUT


class User(BaseModel):
    id: int
    username: str
    role: UserRole = UserRole.STANDARD
    token_issued_at: int = 0  # Unix seconds of the last credential invalidation
