"""Models capturing community flags and votes on issues."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from civictrack.db.session import Base
from civictrack.db.time import utcnow

if TYPE_CHECKING:
    from .issue import Issue


def _new_id() -> str:
    return str(uuid.uuid4())


class IssueFlag(Base):
    """A user's report that an issue is spam or inappropriate."""

    __tablename__ = "issue_flags"
    __table_args__ = (
        # One flag per user per issue; also closes the check-then-insert race.
        UniqueConstraint("issue_id", "flagger_id", name="uq_issue_flags_issue_flagger"),
        Index("ix_issue_flags_issue_id", "issue_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    issue_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("issues.id", ondelete="CASCADE"),
        nullable=False,
    )
    flagger_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id"), nullable=False
    )
    reason: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    issue: Mapped[Issue] = relationship("Issue", back_populates="flags")


class IssueVote(Base):
    """A user's endorsement of an issue."""

    __tablename__ = "issue_votes"
    __table_args__ = (
        UniqueConstraint("issue_id", "voter_id", name="uq_issue_votes_issue_voter"),
        Index("ix_issue_votes_issue_id", "issue_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    issue_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("issues.id", ondelete="CASCADE"),
        nullable=False,
    )
    voter_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    issue: Mapped[Issue] = relationship("Issue", back_populates="votes")
