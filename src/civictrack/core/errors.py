"""Domain error taxonomy shared by services and the API layer.

Services raise these instead of ``HTTPException`` so they stay usable outside
a request; ``civictrack.main`` maps each class onto its HTTP status.
"""

from __future__ import annotations

from fastapi import status


class CivicTrackError(Exception):
    """Base class for failures reported back to the caller."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(CivicTrackError):
    """Malformed or missing input, detected before any mutation."""

    status_code = status.HTTP_400_BAD_REQUEST


class Conflict(CivicTrackError):
    """Duplicate flag or vote for the same (issue, user) pair."""

    status_code = status.HTTP_400_BAD_REQUEST


class Forbidden(CivicTrackError):
    """Banned user or non-admin calling an admin operation."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFound(CivicTrackError):
    """Unknown issue or user id."""

    status_code = status.HTTP_404_NOT_FOUND


class StoreError(CivicTrackError):
    """Underlying persistence failure; surfaced as an opaque 500."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


__all__ = [
    "CivicTrackError",
    "ValidationError",
    "Conflict",
    "Forbidden",
    "NotFound",
    "StoreError",
]
