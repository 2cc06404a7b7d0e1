"""Tests for public issue endpoints."""

from fastapi import status
from sqlalchemy.exc import OperationalError

from civictrack.models import IssueCategory
from civictrack.services.issue_store import IssueStore
from tests.conftest import SF_LAT, SF_LNG, auth_headers


def _form(**overrides):
    data = {
        "title": "Broken streetlight",
        "description": "Light out for a week",
        "category": "lighting",
        "latitude": str(SF_LAT),
        "longitude": str(SF_LNG),
    }
    data.update(overrides)
    return data


def test_create_issue(client, auth_token, test_user) -> None:
    response = client.post("/api/issues", data=_form(address="1 Market St"), headers=auth_token)
    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["status"] == "reported"
    assert body["category"] == "lighting"
    assert body["reporter_id"] == test_user.id
    assert body["address"] == "1 Market St"
    assert body["flag_count"] == 0
    assert body["report_count"] == 1
    assert body["photos"] == []
    assert abs(body["latitude"] - SF_LAT) < 1e-6

    logs = client.get(f"/api/issues/{body['id']}/status-logs").json()
    assert len(logs) == 1
    assert logs[0]["old_status"] is None
    assert logs[0]["new_status"] == "reported"


def test_create_anonymous_issue(client, auth_token) -> None:
    response = client.post("/api/issues", data=_form(is_anonymous="true"), headers=auth_token)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["reporter_id"] is None
    assert response.json()["is_anonymous"] is True


def test_create_issue_with_photos(client, auth_token, upload_store) -> None:
    files = [
        ("photos", ("one.png", b"\x89PNG one", "image/png")),
        ("photos", ("two.jpg", b"\xff\xd8 two", "image/jpeg")),
    ]
    response = client.post("/api/issues", data=_form(), files=files, headers=auth_token)
    assert response.status_code == status.HTTP_201_CREATED
    photos = response.json()["photos"]
    assert len(photos) == 2
    assert len(list(upload_store.upload_dir.iterdir())) == 2


def test_create_issue_too_many_photos(client, auth_token, upload_store) -> None:
    files = [("photos", (f"{i}.png", b"img", "image/png")) for i in range(4)]
    response = client.post("/api/issues", data=_form(), files=files, headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert not upload_store.upload_dir.exists()


def test_create_issue_rejects_non_image(client, auth_token) -> None:
    files = [("photos", ("notes.txt", b"text", "text/plain"))]
    response = client.post("/api/issues", data=_form(), files=files, headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "image" in response.json()["detail"]


def test_create_issue_requires_auth(client) -> None:
    response = client.post("/api/issues", data=_form())
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_banned_user_cannot_create_issue(client, banned_user) -> None:
    response = client.post("/api/issues", data=_form(), headers=auth_headers(banned_user))
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Account is banned"


def test_create_issue_validation(client, auth_token) -> None:
    for overrides in (
        {"category": "potholes"},
        {"latitude": "91"},
        {"longitude": "not-a-number"},
        {"title": ""},
    ):
        response = client.post("/api/issues", data=_form(**overrides), headers=auth_token)
        assert response.status_code == status.HTTP_400_BAD_REQUEST, overrides
        assert response.json()["detail"] == "Invalid data"


def test_nearby_scenario(client, test_issue) -> None:
    response = client.get("/api/issues/nearby", params={"lat": SF_LAT, "lng": SF_LNG, "radius": 1})
    assert response.status_code == status.HTTP_200_OK
    assert [issue["id"] for issue in response.json()] == [test_issue.id]

    far = client.get(
        "/api/issues/nearby", params={"lat": SF_LAT + 1.8, "lng": SF_LNG, "radius": 5}
    )
    assert far.status_code == status.HTTP_200_OK
    assert far.json() == []


def test_nearby_requires_coordinates(client) -> None:
    response = client.get("/api/issues/nearby", params={"lat": SF_LAT})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Latitude and longitude are required"


def test_nearby_filters_and_limit(client, issue_factory) -> None:
    water = issue_factory(category=IssueCategory.WATER)
    issue_factory(category=IssueCategory.ROADS)

    response = client.get(
        "/api/issues/nearby",
        params={"lat": SF_LAT, "lng": SF_LNG, "category": "water", "status": "reported"},
    )
    assert [issue["id"] for issue in response.json()] == [water.id]

    too_many = client.get(
        "/api/issues/nearby", params={"lat": SF_LAT, "lng": SF_LNG, "limit": 1000}
    )
    assert too_many.status_code == status.HTTP_400_BAD_REQUEST


def test_get_issue(client, test_issue) -> None:
    response = client.get(f"/api/issues/{test_issue.id}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["title"] == test_issue.title


def test_get_missing_issue(client) -> None:
    response = client.get("/api/issues/unknown")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Issue not found"


def test_hidden_issue_is_not_public(client, db_session, test_issue) -> None:
    IssueStore(db_session).hide(test_issue.id)
    assert client.get(f"/api/issues/{test_issue.id}").status_code == status.HTTP_404_NOT_FOUND
    nearby = client.get("/api/issues/nearby", params={"lat": SF_LAT, "lng": SF_LNG})
    assert nearby.json() == []


def test_flag_issue(client, other_auth_token, test_issue) -> None:
    url = f"/api/issues/{test_issue.id}/flag"
    response = client.post(url, json={"reason": "spam"}, headers=other_auth_token)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json() == {"message": "Issue flagged successfully"}

    duplicate = client.post(url, headers=other_auth_token)
    assert duplicate.status_code == status.HTTP_400_BAD_REQUEST
    assert duplicate.json()["detail"] == "Issue already flagged by user"


def test_flag_missing_issue(client, auth_token) -> None:
    response = client.post("/api/issues/unknown/flag", headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_flag_requires_auth(client, test_issue) -> None:
    response = client.post(f"/api/issues/{test_issue.id}/flag")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_five_flags_hide_issue(client, db_session, test_issue, user_factory) -> None:
    url = f"/api/issues/{test_issue.id}/flag"
    for _ in range(4):
        assert client.post(url, headers=auth_headers(user_factory())).status_code == 201
    assert client.get(f"/api/issues/{test_issue.id}").status_code == status.HTTP_200_OK

    assert client.post(url, headers=auth_headers(user_factory())).status_code == 201
    assert client.get(f"/api/issues/{test_issue.id}").status_code == status.HTTP_404_NOT_FOUND


def test_vote_issue(client, auth_token, other_auth_token, test_issue) -> None:
    url = f"/api/issues/{test_issue.id}/vote"
    assert client.post(url, headers=auth_token).status_code == status.HTTP_201_CREATED
    assert client.post(url, headers=other_auth_token).status_code == status.HTTP_201_CREATED

    duplicate = client.post(url, headers=auth_token)
    assert duplicate.status_code == status.HTTP_400_BAD_REQUEST
    assert duplicate.json()["detail"] == "User already voted for this issue"

    assert client.get(f"/api/issues/{test_issue.id}").json()["report_count"] == 3


def test_status_logs_missing_issue(client) -> None:
    assert client.get("/api/issues/unknown/status-logs").status_code == status.HTTP_404_NOT_FOUND


def test_status_logs_of_anonymous_issue_hide_submitter(client, auth_token, admin_user) -> None:
    created = client.post("/api/issues", data=_form(is_anonymous="true"), headers=auth_token)
    issue_id = created.json()["id"]
    client.patch(
        f"/api/admin/issues/{issue_id}/status",
        json={"status": "in_progress"},
        headers=auth_headers(admin_user),
    )

    logs = client.get(f"/api/issues/{issue_id}/status-logs").json()
    assert [log["new_status"] for log in logs] == ["in_progress", "reported"]
    assert all(log["changed_by"] is None for log in logs)


def test_status_logs_of_named_issue_keep_actor(client, test_user, test_issue) -> None:
    logs = client.get(f"/api/issues/{test_issue.id}/status-logs").json()
    assert logs[0]["changed_by"] == test_user.id


def test_failed_create_removes_stored_photos(client, auth_token, upload_store, monkeypatch) -> None:
    def _fail(self, data, reporter):
        raise OperationalError("INSERT INTO issues", {}, Exception("disk I/O error"))

    monkeypatch.setattr(IssueStore, "create", _fail)
    files = [("photos", ("one.png", b"\x89PNG one", "image/png"))]
    response = client.post("/api/issues", data=_form(), files=files, headers=auth_token)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert list(upload_store.upload_dir.iterdir()) == []
