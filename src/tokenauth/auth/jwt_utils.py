"""JWT encode/decode helpers for session tokens."""

from __future__ import annotations

import jwt

from tokenauth.models import Claims, Scope

JWT_ALGORITHM = "HS256"

_DECODE_OPTIONS = {
    # exp is checked by the service against its own clock; iat is only
    # compared with the user's invalidation timestamp. nbf is never issued
    # and is not checked against the wall clock either.
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
    "require": ["iat"],
}


def encode_claims(claims: Claims, secret: bytes) -> str:
    """Sign claims with HS256."""
    return jwt.encode(claims.to_payload(), secret, algorithm=JWT_ALGORITHM)


def decode_claims(token: str, secret: bytes) -> Claims:
    """Verify the signature and return the claims.

    Only HS256 is accepted; a token declaring any other algorithm (``none``
    included) raises jwt.InvalidAlgorithmError. Raises jwt.InvalidTokenError
    for any signature or format problem and pydantic.ValidationError for a
    payload with missing or mistyped fields. Expiry is NOT checked here.
    """
    payload = jwt.decode(
        token, secret, algorithms=[JWT_ALGORITHM], options=_DECODE_OPTIONS
    )
    return Claims.model_validate(payload)


def peek_scope(token: str) -> Scope:
    """Read the scope claim WITHOUT verifying the signature.

    Used only to choose which secret to verify with. The value domain is the
    closed Scope enum: anything other than the exact ``"kubeconfig"`` string,
    including a malformed token, selects the default scope. The caller must
    still verify the token with the selected secret.
    """
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return Scope.DEFAULT

    if payload.get("scope") == Scope.KUBECONFIG.value:
        return Scope.KUBECONFIG
    return Scope.DEFAULT
