"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from civictrack.core.errors import Forbidden
from civictrack.core.security import InvalidTokenError, decode_access_token
from civictrack.db.session import get_db
from civictrack.models import User
from civictrack.services.uploads import UploadStore, get_upload_store
from civictrack.services.user_service import upsert_from_claims

# Missing credentials are reported as 401 below rather than by the scheme.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Authenticate the bearer token and return the matching user.

    The user row is created or refreshed from the token's claims, mirroring
    the identity provider's profile.

    Raises:
        HTTPException: 401 if the token is missing or invalid.
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        claims = decode_access_token(credentials.credentials)
    except InvalidTokenError as err:
        raise _unauthorized() from err
    return upsert_from_claims(db, claims)


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def require_admin(current_user: CurrentUserDep) -> User:
    """Allow only administrators through."""
    if not current_user.is_admin:
        raise Forbidden("Admin access required")
    return current_user


AdminUserDep = Annotated[User, Depends(require_admin)]
UploadStoreDep = Annotated[UploadStore, Depends(get_upload_store)]
