"""SQLAlchemy models for issues and their status history."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from civictrack.db.session import Base
from civictrack.db.time import utcnow

if TYPE_CHECKING:
    from .moderation import IssueFlag, IssueVote


class IssueCategory(str, Enum):
    """Kinds of infrastructure problems citizens can report."""

    ROADS = "roads"
    LIGHTING = "lighting"
    WATER = "water"
    CLEANLINESS = "cleanliness"
    SAFETY = "safety"
    OBSTRUCTIONS = "obstructions"


class IssueStatus(str, Enum):
    """Lifecycle states; ``reported`` is the initial one."""

    REPORTED = "reported"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


def _new_id() -> str:
    return str(uuid.uuid4())


class Issue(Base):
    """A reported civic problem pinned to a location."""

    __tablename__ = "issues"
    __table_args__ = (
        CheckConstraint("flag_count >= 0", name="ck_issues_flag_count"),
        CheckConstraint("report_count >= 1", name="ck_issues_report_count"),
        Index("ix_issues_created_at", "created_at"),
        Index("ix_issues_flag_count", "flag_count"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=IssueStatus.REPORTED.value
    )

    latitude: Mapped[Decimal] = mapped_column(Numeric(10, 8), nullable=False)
    longitude: Mapped[Decimal] = mapped_column(Numeric(11, 8), nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Stored upload paths, at most three.
    photos: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # NULL when the report was submitted anonymously.
    reporter_id: Mapped[str | None] = mapped_column(
        String(255), ForeignKey("users.id"), nullable=True
    )
    is_anonymous: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Community moderation counters; changed only via SQL-side increments.
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    flag_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # Doubles as the vote tally: each vote counts as a corroborating report.
    report_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    status_logs: Mapped[list[IssueStatusLog]] = relationship(
        "IssueStatusLog",
        back_populates="issue",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    flags: Mapped[list[IssueFlag]] = relationship(
        "IssueFlag",
        back_populates="issue",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    votes: Mapped[list[IssueVote]] = relationship(
        "IssueVote",
        back_populates="issue",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class IssueStatusLog(Base):
    """Append-only audit row written for every status change."""

    __tablename__ = "issue_status_logs"
    __table_args__ = (Index("ix_issue_status_logs_issue_id", "issue_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    issue_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("issues.id", ondelete="CASCADE"),
        nullable=False,
    )
    # NULL only for the entry written when the issue is created.
    old_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    new_status: Mapped[str] = mapped_column(String(20), nullable=False)
    changed_by: Mapped[str | None] = mapped_column(
        String(255), ForeignKey("users.id"), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    issue: Mapped[Issue] = relationship("Issue", back_populates="status_logs")
