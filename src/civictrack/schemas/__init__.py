"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .issue import (
    AnalyticsResponse,
    IssueCreate,
    IssueResponse,
    NearbyQuery,
    StatusLogResponse,
    StatusUpdate,
)
from .moderation import FlagCreate, MessageResponse
from .user import UserResponse

__all__ = [
    "AnalyticsResponse", "IssueCreate", "IssueResponse", "NearbyQuery",
    "StatusLogResponse", "StatusUpdate",
    "FlagCreate", "MessageResponse",
    "UserResponse",
]
