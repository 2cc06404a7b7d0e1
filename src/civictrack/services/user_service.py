"""Helpers for managing users mirrored from the identity provider."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from civictrack.core.errors import Conflict, NotFound
from civictrack.db.time import utcnow
from civictrack.models.user import User

__all__ = [
    "get_user",
    "upsert_from_claims",
    "ban_user",
    "unban_user",
    "set_admin",
]

logger = logging.getLogger(__name__)

# Claim name -> User attribute for profile fields refreshed on every login.
_PROFILE_CLAIMS = {
    "email": "email",
    "first_name": "first_name",
    "last_name": "last_name",
    "profile_image_url": "profile_image_url",
}


def get_user(db: Session, user_id: str) -> User | None:
    """Return a single user by primary key."""
    return db.get(User, user_id)


def upsert_from_claims(db: Session, claims: Mapping[str, Any]) -> User:
    """Create or refresh the user identified by the token's ``sub`` claim.

    Only profile fields present in the claims are written; admin and ban
    flags are never taken from the token.
    """
    user_id = str(claims["sub"])
    user = db.get(User, user_id)
    created = user is None
    if user is None:
        user = User(id=user_id)
        db.add(user)

    changed = created
    for claim, attribute in _PROFILE_CLAIMS.items():
        if claim in claims and getattr(user, attribute) != claims[claim]:
            setattr(user, attribute, claims[claim])
            changed = True

    if changed:
        user.updated_at = utcnow()
        try:
            db.commit()
        except IntegrityError as err:
            db.rollback()
            logger.info("Profile update for %s rejected: email already in use", user_id)
            raise Conflict("Email is already registered to another account") from err
        db.refresh(user)
    if created:
        logger.info("Registered user %s", user_id)
    return user


def _set_banned(db: Session, user_id: str, banned: bool) -> None:
    result = db.execute(
        update(User).where(User.id == user_id).values(is_banned=banned, updated_at=utcnow())
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFound("User not found")
    db.commit()


def ban_user(db: Session, user_id: str) -> None:
    """Prevent a user from submitting new issues."""
    _set_banned(db, user_id, True)
    logger.info("User %s banned", user_id)


def unban_user(db: Session, user_id: str) -> None:
    """Lift a ban."""
    _set_banned(db, user_id, False)
    logger.info("User %s unbanned", user_id)


def set_admin(db: Session, user_id: str, is_admin: bool) -> User:
    """Grant or revoke administrator rights on an existing user."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    user.is_admin = is_admin
    user.updated_at = utcnow()
    db.commit()
    db.refresh(user)
    logger.info("User %s admin=%s", user_id, is_admin)
    return user
