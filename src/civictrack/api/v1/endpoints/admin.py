"""Administrator endpoints for triage, analytics and account control."""

from __future__ import annotations

from fastapi import APIRouter

from civictrack.api.v1.dependencies import AdminUserDep, SessionDep
from civictrack.models import Issue
from civictrack.schemas.issue import AnalyticsResponse, IssueResponse, StatusUpdate
from civictrack.schemas.moderation import MessageResponse
from civictrack.services import user_service
from civictrack.services.analytics import AnalyticsService
from civictrack.services.issue_store import IssueStore

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/issues/flagged", response_model=list[IssueResponse])
async def list_flagged_issues(admin: AdminUserDep, db: SessionDep) -> list[Issue]:
    """List flagged issues, most flagged first; hidden issues are included."""
    return AnalyticsService(db).flagged_issues()


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(admin: AdminUserDep, db: SessionDep) -> AnalyticsResponse:
    """Return issue counts overall, by category and by status."""
    return AnalyticsResponse.model_validate(AnalyticsService(db).analytics())


@router.patch("/issues/{issue_id}/status", response_model=IssueResponse)
async def update_issue_status(
    issue_id: str,
    payload: StatusUpdate,
    admin: AdminUserDep,
    db: SessionDep,
) -> Issue:
    """Change an issue's status, recording the transition in its history."""
    return IssueStore(db).set_status(issue_id, payload.status, admin.id, payload.notes)


@router.patch("/issues/{issue_id}/hide", response_model=MessageResponse)
async def hide_issue(issue_id: str, admin: AdminUserDep, db: SessionDep) -> MessageResponse:
    """Remove an issue from public listings."""
    IssueStore(db).hide(issue_id)
    return MessageResponse(message="Issue hidden successfully")


@router.patch("/users/{user_id}/ban", response_model=MessageResponse)
async def ban_user(user_id: str, admin: AdminUserDep, db: SessionDep) -> MessageResponse:
    """Stop a user from reporting new issues."""
    user_service.ban_user(db, user_id)
    return MessageResponse(message="User banned successfully")


@router.patch("/users/{user_id}/unban", response_model=MessageResponse)
async def unban_user(user_id: str, admin: AdminUserDep, db: SessionDep) -> MessageResponse:
    """Lift a user's ban."""
    user_service.unban_user(db, user_id)
    return MessageResponse(message="User unbanned successfully")
