"""Persistence of issues and their status history."""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from civictrack.core.errors import NotFound, StoreError, ValidationError
from civictrack.core.settings import settings
from civictrack.db.time import utcnow
from civictrack.models import Issue, IssueStatus, IssueStatusLog, User
from civictrack.schemas.issue import IssueCreate

logger = logging.getLogger(__name__)

# Transitions allowed when STRICT_STATUS_TRANSITIONS is enabled.
STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    IssueStatus.REPORTED.value: frozenset(
        {IssueStatus.IN_PROGRESS.value, IssueStatus.RESOLVED.value}
    ),
    IssueStatus.IN_PROGRESS.value: frozenset(
        {IssueStatus.REPORTED.value, IssueStatus.RESOLVED.value}
    ),
    IssueStatus.RESOLVED.value: frozenset(),
}

INITIAL_STATUS_NOTE = "Issue reported"


class IssueStore:
    """Issue persistence bound to a single request session.

    ``set_status`` is the only code path that changes ``Issue.status`` so the
    audit trail in ``issue_status_logs`` always matches the issue history.
    """

    def __init__(self, db: Session, *, strict_transitions: bool | None = None) -> None:
        self.db = db
        if strict_transitions is None:
            strict_transitions = settings.strict_status_transitions
        self.strict_transitions = strict_transitions

    def create(self, data: IssueCreate, reporter: User) -> Issue:
        """Insert a new issue together with its initial status log entry."""
        issue = Issue(
            title=data.title,
            description=data.description,
            category=data.category.value,
            status=IssueStatus.REPORTED.value,
            latitude=Decimal(str(data.latitude)),
            longitude=Decimal(str(data.longitude)),
            address=data.address,
            photos=list(data.photos),
            reporter_id=None if data.is_anonymous else reporter.id,
            is_anonymous=data.is_anonymous,
            is_hidden=False,
            flag_count=0,
            report_count=1,
        )
        self.db.add(issue)
        try:
            self.db.flush()
            self.db.add(
                IssueStatusLog(
                    issue_id=issue.id,
                    old_status=None,
                    new_status=IssueStatus.REPORTED.value,
                    changed_by=reporter.id,
                    notes=INITIAL_STATUS_NOTE,
                )
            )
            self.db.commit()
        except SQLAlchemyError as err:
            self.db.rollback()
            logger.error("Failed to create issue", exc_info=True)
            raise StoreError("Failed to create issue") from err

        self.db.refresh(issue)
        logger.info("Issue %s created in category %s", issue.id, issue.category)
        return issue

    def get(self, issue_id: str) -> Issue:
        """Return an issue regardless of visibility.

        Raises:
            NotFound: If no issue has this id.
        """
        issue = self.db.get(Issue, issue_id)
        if issue is None:
            raise NotFound("Issue not found")
        return issue

    def get_visible(self, issue_id: str) -> Issue:
        """Return an issue for public display; hidden issues read as missing."""
        issue = self.get(issue_id)
        if issue.is_hidden:
            raise NotFound("Issue not found")
        return issue

    def set_status(
        self,
        issue_id: str,
        status: IssueStatus | str,
        actor_id: str | None,
        notes: str | None = None,
    ) -> Issue:
        """Change an issue's status and append the matching log entry.

        Raises:
            NotFound: If no issue has this id.
            ValidationError: For an unknown status, or a disallowed transition
                when strict transitions are enabled.
        """
        try:
            new_status = IssueStatus(status).value
        except ValueError as err:
            raise ValidationError(f"Unknown status: {status}") from err

        issue = self.db.execute(
            select(Issue).where(Issue.id == issue_id).with_for_update()
        ).scalar_one_or_none()
        if issue is None:
            raise NotFound("Issue not found")

        old_status = issue.status
        if self.strict_transitions and new_status not in STATUS_TRANSITIONS.get(old_status, ()):
            raise ValidationError(f"Cannot change status from {old_status} to {new_status}")

        issue.status = new_status
        issue.updated_at = utcnow()
        self.db.add(
            IssueStatusLog(
                issue_id=issue.id,
                old_status=old_status,
                new_status=new_status,
                changed_by=actor_id,
                notes=notes,
            )
        )
        try:
            self.db.commit()
        except SQLAlchemyError as err:
            self.db.rollback()
            logger.error("Failed to update status of issue %s", issue_id, exc_info=True)
            raise StoreError("Failed to update issue status") from err

        self.db.refresh(issue)
        logger.info("Issue %s status %s -> %s by %s", issue.id, old_status, new_status, actor_id)
        return issue

    def hide(self, issue_id: str) -> None:
        """Exclude an issue from public listings."""
        result = self.db.execute(
            update(Issue).where(Issue.id == issue_id).values(is_hidden=True)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise NotFound("Issue not found")
        self.db.commit()
        logger.info("Issue %s hidden", issue_id)

    def increment_report_count(self, issue_id: str) -> None:
        """Atomically bump the report counter without committing."""
        result = self.db.execute(
            update(Issue)
            .where(Issue.id == issue_id)
            .values(report_count=Issue.report_count + 1)
        )
        if result.rowcount == 0:
            raise NotFound("Issue not found")

    def status_logs(self, issue_id: str) -> list[IssueStatusLog]:
        """Return an issue's status history, newest first."""
        self.get_visible(issue_id)
        return list(
            self.db.execute(
                select(IssueStatusLog)
                .where(IssueStatusLog.issue_id == issue_id)
                .order_by(IssueStatusLog.created_at.desc(), IssueStatusLog.id.desc())
            ).scalars()
        )
