"""Authentication endpoints for the CivicTrack API."""

from __future__ import annotations

from fastapi import APIRouter

from civictrack.api.v1.dependencies import CurrentUserDep
from civictrack.models import User
from civictrack.schemas.user import UserResponse

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.get("/user", response_model=UserResponse)
async def get_authenticated_user(current_user: CurrentUserDep) -> User:
    """Return the profile of the caller identified by the bearer token."""
    return current_user
