"""Community flagging and voting on issues."""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from civictrack.core.errors import Conflict, NotFound, StoreError
from civictrack.core.settings import settings
from civictrack.models import Issue, IssueFlag, IssueVote
from civictrack.services.issue_store import IssueStore

logger = logging.getLogger(__name__)


class ModerationService:
    """Service handling flag/vote bookkeeping and the auto-hide rule.

    Each operation runs its duplicate check, insert and counter increment in
    one transaction. The unique constraints on ``issue_flags`` and
    ``issue_votes`` reject a concurrent duplicate that slipped past the check.
    """

    def __init__(self, db: Session, *, hide_threshold: int | None = None) -> None:
        self.db = db
        self.hide_threshold = (
            settings.flag_hide_threshold if hide_threshold is None else hide_threshold
        )

    def flag(self, issue_id: str, user_id: str, reason: str | None = None) -> Issue:
        """Record a flag and hide the issue once the threshold is reached.

        Raises:
            NotFound: If the issue does not exist.
            Conflict: If this user already flagged the issue.
        """
        store = IssueStore(self.db)
        store.get(issue_id)

        existing = self.db.execute(
            select(IssueFlag.id).where(
                IssueFlag.issue_id == issue_id,
                IssueFlag.flagger_id == user_id,
            )
        ).first()
        if existing is not None:
            logger.info("Duplicate flag on issue %s by %s rejected", issue_id, user_id)
            raise Conflict("Issue already flagged by user")

        try:
            self.db.add(IssueFlag(issue_id=issue_id, flagger_id=user_id, reason=reason))
            self.db.flush()
            self.db.execute(
                update(Issue)
                .where(Issue.id == issue_id)
                .values(flag_count=Issue.flag_count + 1)
            )
            # Re-evaluated on every flag so the rule holds even if the
            # threshold setting was lowered after earlier flags.
            hidden = self.db.execute(
                update(Issue)
                .where(
                    Issue.id == issue_id,
                    Issue.flag_count >= self.hide_threshold,
                    Issue.is_hidden.is_(False),
                )
                .values(is_hidden=True)
            ).rowcount
            self.db.commit()
        except IntegrityError as err:
            self.db.rollback()
            logger.info("Concurrent duplicate flag on issue %s by %s rejected", issue_id, user_id)
            raise Conflict("Issue already flagged by user") from err
        except SQLAlchemyError as err:
            self.db.rollback()
            logger.error("Failed to flag issue %s", issue_id, exc_info=True)
            raise StoreError("Failed to flag issue") from err

        issue = store.get(issue_id)
        self.db.refresh(issue)
        if hidden:
            logger.info(
                "Issue %s auto-hidden after %d flags", issue_id, issue.flag_count
            )
        return issue

    def vote(self, issue_id: str, user_id: str) -> Issue:
        """Record a vote and bump the issue's report count.

        Raises:
            NotFound: If the issue does not exist.
            Conflict: If this user already voted for the issue.
        """
        store = IssueStore(self.db)
        store.get(issue_id)

        existing = self.db.execute(
            select(IssueVote.id).where(
                IssueVote.issue_id == issue_id,
                IssueVote.voter_id == user_id,
            )
        ).first()
        if existing is not None:
            logger.info("Duplicate vote on issue %s by %s rejected", issue_id, user_id)
            raise Conflict("User already voted for this issue")

        try:
            self.db.add(IssueVote(issue_id=issue_id, voter_id=user_id))
            self.db.flush()
            store.increment_report_count(issue_id)
            self.db.commit()
        except IntegrityError as err:
            self.db.rollback()
            logger.info("Concurrent duplicate vote on issue %s by %s rejected", issue_id, user_id)
            raise Conflict("User already voted for this issue") from err
        except SQLAlchemyError as err:
            self.db.rollback()
            logger.error("Failed to vote for issue %s", issue_id, exc_info=True)
            raise StoreError("Failed to record vote") from err

        issue = store.get(issue_id)
        self.db.refresh(issue)
        return issue
