"""Unit tests for the ORM models defined in civictrack.models.

These tests verify basic mapping correctness: table names, the one-per-user
unique constraints on flags and votes, cascading foreign keys, and that
relationships are instrumented attributes.
"""

from sqlalchemy import UniqueConstraint, select
from sqlalchemy.orm import attributes

from civictrack import models


def test_table_names():
    """Model classes expose expected __tablename__ values."""
    assert models.User.__tablename__ == "users"
    assert models.Issue.__tablename__ == "issues"
    assert models.IssueStatusLog.__tablename__ == "issue_status_logs"
    assert models.IssueFlag.__tablename__ == "issue_flags"
    assert models.IssueVote.__tablename__ == "issue_votes"


def _unique_column_sets(model):
    return {
        frozenset(c.name for c in constraint.columns)
        for constraint in model.__table__.constraints
        if isinstance(constraint, UniqueConstraint)
    }


def test_flags_and_votes_are_unique_per_user():
    assert frozenset({"issue_id", "flagger_id"}) in _unique_column_sets(models.IssueFlag)
    assert frozenset({"issue_id", "voter_id"}) in _unique_column_sets(models.IssueVote)


def test_child_rows_cascade_with_issue():
    for model in (models.IssueStatusLog, models.IssueFlag, models.IssueVote):
        (fk,) = model.__table__.c.issue_id.foreign_keys
        assert fk.column.table.name == "issues"
        assert fk.ondelete == "CASCADE"


def test_relationships_are_instrumented_attributes():
    rel_attrs = [
        models.Issue.status_logs,
        models.Issue.flags,
        models.Issue.votes,
        models.IssueStatusLog.issue,
        models.IssueFlag.issue,
        models.IssueVote.issue,
    ]
    for a in rel_attrs:
        assert isinstance(a, attributes.InstrumentedAttribute)


def test_deleting_issue_removes_history(db_session, test_issue, other_user):
    db_session.add(models.IssueVote(issue_id=test_issue.id, voter_id=other_user.id))
    db_session.commit()

    db_session.delete(test_issue)
    db_session.commit()

    assert db_session.scalars(select(models.IssueStatusLog)).all() == []
    assert db_session.scalars(select(models.IssueVote)).all() == []
