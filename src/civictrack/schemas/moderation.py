"""Flag and vote schemas."""

from pydantic import BaseModel, Field


class FlagCreate(BaseModel):
    """Optional explanation attached to a flag."""

    reason: str | None = Field(None, max_length=100, description="Why the issue is inappropriate")


class MessageResponse(BaseModel):
    """Plain acknowledgement returned by mutation endpoints."""

    message: str
