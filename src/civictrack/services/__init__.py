"""Business logic services for the CivicTrack application."""

from .analytics import AnalyticsService
from .issue_store import IssueStore
from .moderation import ModerationService
from .proximity import find_nearby
from .uploads import UploadStore

__all__ = [
    "AnalyticsService",
    "IssueStore",
    "ModerationService",
    "UploadStore",
    "find_nearby",
]
