"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """Profile of an authenticated user."""

    id: str
    email: str | None
    first_name: str | None
    last_name: str | None
    profile_image_url: str | None
    is_admin: bool
    is_banned: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
