"""Public issue endpoints: reporting, browsing, flagging and voting."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from civictrack.api.v1.dependencies import CurrentUserDep, SessionDep, UploadStoreDep
from civictrack.core.errors import Forbidden, ValidationError
from civictrack.core.settings import settings
from civictrack.models import Issue, IssueCategory, IssueStatus
from civictrack.schemas.issue import (
    IssueCreate,
    IssueResponse,
    NearbyQuery,
    StatusLogResponse,
)
from civictrack.schemas.moderation import FlagCreate, MessageResponse
from civictrack.services.issue_store import IssueStore
from civictrack.services.moderation import ModerationService
from civictrack.services.proximity import find_nearby

router = APIRouter(prefix="/issues", tags=["issues"])


@router.post("", response_model=IssueResponse, status_code=status.HTTP_201_CREATED)
async def create_issue(
    current_user: CurrentUserDep,
    db: SessionDep,
    upload_store: UploadStoreDep,
    title: Annotated[str, Form(min_length=1, max_length=255)],
    description: Annotated[str, Form(min_length=1)],
    category: Annotated[IssueCategory, Form()],
    latitude: Annotated[float, Form(ge=-90, le=90)],
    longitude: Annotated[float, Form(ge=-180, le=180)],
    address: Annotated[str | None, Form()] = None,
    is_anonymous: Annotated[bool, Form()] = False,
    photos: Annotated[list[UploadFile] | None, File()] = None,
) -> Issue:
    """Report a new issue with up to three photos.

    Raises:
        Forbidden: If the reporting account is banned.
        ValidationError: If the photos break the upload limits.
    """
    if current_user.is_banned:
        raise Forbidden("Account is banned")

    stored_photos = await upload_store.accept(photos or [])
    try:
        data = IssueCreate(
            title=title,
            description=description,
            category=category,
            latitude=latitude,
            longitude=longitude,
            address=address or None,
            is_anonymous=is_anonymous,
            photos=stored_photos,
        )
        return IssueStore(db).create(data, current_user)
    except Exception:
        # No issue references the photos, so they must not outlive the request.
        upload_store.discard(stored_photos)
        raise


@router.get("/nearby", response_model=list[IssueResponse])
async def list_nearby_issues(
    db: SessionDep,
    lat: float | None = Query(None, ge=-90, le=90, description="Origin latitude"),
    lng: float | None = Query(None, ge=-180, le=180, description="Origin longitude"),
    radius: float = Query(settings.nearby_default_radius_km, description="Radius in kilometres"),
    category: IssueCategory | None = Query(None),
    status_filter: IssueStatus | None = Query(None, alias="status"),
    limit: int = Query(settings.nearby_default_limit, ge=1, le=settings.nearby_max_limit),
    offset: int = Query(0, ge=0),
) -> list[Issue]:
    """List visible issues within ``radius`` km of ``(lat, lng)``, newest first."""
    if lat is None or lng is None:
        raise ValidationError("Latitude and longitude are required")

    query = NearbyQuery(
        lat=lat,
        lng=lng,
        radius_km=radius,
        category=category,
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    return find_nearby(db, query)


@router.get("/{issue_id}", response_model=IssueResponse)
async def get_issue(issue_id: str, db: SessionDep) -> Issue:
    """Fetch one visible issue."""
    return IssueStore(db).get_visible(issue_id)


@router.get("/{issue_id}/status-logs", response_model=list[StatusLogResponse])
async def get_issue_status_logs(issue_id: str, db: SessionDep) -> list[StatusLogResponse]:
    """Return the issue's status history, newest first.

    Actors are blanked on anonymous reports so the public history cannot
    name the submitter.
    """
    store = IssueStore(db)
    issue = store.get_visible(issue_id)
    entries = [StatusLogResponse.model_validate(log) for log in store.status_logs(issue_id)]
    if issue.is_anonymous:
        entries = [entry.model_copy(update={"changed_by": None}) for entry in entries]
    return entries


@router.post(
    "/{issue_id}/flag",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def flag_issue(
    issue_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    payload: FlagCreate | None = None,
) -> MessageResponse:
    """Flag an issue as inappropriate; one flag per user."""
    reason = payload.reason if payload is not None else None
    ModerationService(db).flag(issue_id, current_user.id, reason)
    return MessageResponse(message="Issue flagged successfully")


@router.post(
    "/{issue_id}/vote",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def vote_for_issue(
    issue_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MessageResponse:
    """Endorse an issue; one vote per user."""
    ModerationService(db).vote(issue_id, current_user.id)
    return MessageResponse(message="Vote recorded successfully")
