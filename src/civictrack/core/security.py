"""Bearer token helpers.

Tokens are issued by the external identity provider; the service only needs
to verify them. ``create_access_token`` mints compatible tokens for tests and
local development.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from civictrack.core.settings import settings


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be verified."""


def create_access_token(subject: str, extra_claims: dict[str, Any] | None = None) -> str:
    """Create a signed JWT whose ``sub`` is the user id."""
    to_encode: dict[str, Any] = {"sub": subject}
    if extra_claims:
        to_encode.update(extra_claims)
    if settings.jwt_audience:
        to_encode.setdefault("aud", settings.jwt_audience)
    to_encode["exp"] = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify ``token`` and return its claims.

    Raises:
        InvalidTokenError: If the signature, expiry or audience check fails,
            or the token carries no subject.
    """
    options = {"verify_aud": settings.jwt_audience is not None}
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except JWTError as err:
        raise InvalidTokenError("Could not validate credentials") from err

    if not claims.get("sub"):
        raise InvalidTokenError("Could not validate credentials")
    return claims
