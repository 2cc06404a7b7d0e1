"""Issue-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from civictrack.models.issue import IssueCategory, IssueStatus


class IssueCreate(BaseModel):
    """Validated fields of a new report; photos are stored separately."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: IssueCategory
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str | None = None
    is_anonymous: bool = Field(False, description="Hide the reporter's identity")
    photos: list[str] = Field(default_factory=list, max_length=3)


class IssueResponse(BaseModel):
    """Schema for issue information returned by the API."""

    id: str
    title: str
    description: str
    category: IssueCategory
    status: IssueStatus
    latitude: float
    longitude: float
    address: str | None
    photos: list[str]
    reporter_id: str | None
    is_anonymous: bool
    is_hidden: bool
    flag_count: int
    report_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NearbyQuery(BaseModel):
    """Parameters of a proximity search."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    radius_km: float = 5.0
    category: IssueCategory | None = None
    status: IssueStatus | None = None
    limit: int = Field(50, ge=1)
    offset: int = Field(0, ge=0)


class StatusUpdate(BaseModel):
    """Body of an admin status change."""

    status: IssueStatus
    notes: str | None = Field(None, max_length=2000)


class StatusLogResponse(BaseModel):
    """One entry of an issue's status history."""

    id: str
    issue_id: str
    old_status: IssueStatus | None
    new_status: IssueStatus
    changed_by: str | None
    notes: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AnalyticsResponse(BaseModel):
    """Aggregate counts over non-hidden issues."""

    total_issues: int
    issues_by_category: dict[str, int]
    issues_by_status: dict[str, int]
