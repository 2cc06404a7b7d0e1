"""SQLAlchemy models for the CivicTrack application."""

from .issue import Issue, IssueCategory, IssueStatus, IssueStatusLog
from .moderation import IssueFlag, IssueVote
from .user import User

__all__ = [
    "Issue", "IssueCategory", "IssueStatus", "IssueStatusLog",
    "IssueFlag", "IssueVote",
    "User",
]
