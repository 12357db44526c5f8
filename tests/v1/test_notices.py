# tests/v1/test_notices.py
"""Tests for notice endpoints."""

from fastapi import status

from tests.conftest import auth_headers


def test_moderator_sends_notice(client, moderator) -> None:
    response = client.post(
        "/api/v1/notices/",
        json={"subject": "Maintenance", "body": "Down at noon"},
        headers=auth_headers(moderator),
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["subject"] == "Maintenance"
    assert data["is_active"] is True


def test_member_cannot_send_notice(client, alice, alice_auth) -> None:
    response = client.post(
        "/api/v1/notices/",
        json={"subject": "Maintenance", "body": "Down at noon"},
        headers=alice_auth,
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_notice_requires_body(client, moderator) -> None:
    response = client.post(
        "/api/v1/notices/",
        json={"subject": "Maintenance", "body": ""},
        headers=auth_headers(moderator),
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_active_notices_newest_first(client, moderator, alice_auth) -> None:
    headers = auth_headers(moderator)
    client.post("/api/v1/notices/", json={"subject": "First", "body": "One"}, headers=headers)
    client.post("/api/v1/notices/", json={"subject": "Second", "body": "Two"}, headers=headers)

    response = client.get("/api/v1/notices/active", headers=alice_auth)

    assert response.status_code == status.HTTP_200_OK
    assert [notice["subject"] for notice in response.json()] == ["Second", "First"]
