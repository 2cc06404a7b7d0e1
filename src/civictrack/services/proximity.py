"""Radius search over issues using great-circle distance."""

from __future__ import annotations

from sqlalchemy import ColumnElement, case, func, literal, select
from sqlalchemy.orm import Session

from civictrack.models import Issue
from civictrack.schemas.issue import NearbyQuery

EARTH_RADIUS_KM = 6371.0


def distance_km(lat: float, lng: float) -> ColumnElement[float]:
    """SQL expression for the distance from ``(lat, lng)`` to each issue.

    Uses the spherical law of cosines. The cosine term is clamped to [-1, 1]
    so rounding at the origin cannot push it outside the domain of acos.
    """
    origin_lat = func.radians(literal(lat))
    origin_lng = func.radians(literal(lng))
    issue_lat = func.radians(Issue.latitude)
    issue_lng = func.radians(Issue.longitude)

    cosine = (
        func.cos(origin_lat) * func.cos(issue_lat) * func.cos(issue_lng - origin_lng)
        + func.sin(origin_lat) * func.sin(issue_lat)
    )
    clamped = case((cosine > 1.0, 1.0), (cosine < -1.0, -1.0), else_=cosine)
    return EARTH_RADIUS_KM * func.acos(clamped)


def find_nearby(db: Session, query: NearbyQuery) -> list[Issue]:
    """Return visible issues within ``query.radius_km`` of the origin.

    Results are newest first; ``offset`` and ``limit`` apply after filtering.
    """
    stmt = select(Issue).where(
        distance_km(query.lat, query.lng) <= query.radius_km,
        Issue.is_hidden.is_(False),
    )
    if query.category is not None:
        stmt = stmt.where(Issue.category == query.category.value)
    if query.status is not None:
        stmt = stmt.where(Issue.status == query.status.value)

    stmt = (
        stmt.order_by(Issue.created_at.desc(), Issue.id)
        .offset(query.offset)
        .limit(query.limit)
    )
    return list(db.execute(stmt).scalars())
