"""Aggregate views used by the admin dashboard."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from civictrack.models import Issue


class AnalyticsService:
    """Read-only admin queries over the issue table."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def flagged_issues(self) -> list[Issue]:
        """Return every flagged issue, most flagged first, hidden ones included."""
        stmt = (
            select(Issue)
            .where(Issue.flag_count >= 1)
            .order_by(Issue.flag_count.desc(), Issue.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars())

    def analytics(self) -> dict[str, object]:
        """Tally non-hidden issues overall, by category and by status."""
        visible = Issue.is_hidden.is_(False)

        total = self.db.execute(
            select(func.count()).select_from(Issue).where(visible)
        ).scalar_one()

        by_category = {
            category: count
            for category, count in self.db.execute(
                select(Issue.category, func.count()).where(visible).group_by(Issue.category)
            )
        }
        by_status = {
            status: count
            for status, count in self.db.execute(
                select(Issue.status, func.count()).where(visible).group_by(Issue.status)
            )
            if status
        }

        return {
            "total_issues": total,
            "issues_by_category": by_category,
            "issues_by_status": by_status,
        }
