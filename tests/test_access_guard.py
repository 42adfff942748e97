"""Tests for bearer-token protection of API routes."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest


def _assert_unauthorized(response):
    assert response.status_code == 401
    body = response.get_json()
    assert body == {"ok": False, "error": {"code": "UNAUTHORIZED", "message": "Unauthorized"}}


def test_valid_token_reaches_handler(client, auth_headers):
    response = client.get("/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.get_json()["data"]["user"]["email"] == "a@b.com"


def test_missing_header(client):
    _assert_unauthorized(client.get("/me"))


@pytest.mark.parametrize(
    "header",
    ["Token abc", "Bearer", "Bearer ", "Bearer not-a-jwt", "bearer abc"],
)
def test_malformed_header(client, header):
    _assert_unauthorized(client.get("/notes", headers={"Authorization": header}))


def test_refresh_token_as_bearer(client, signup):
    signup()
    refresh = client.get_cookie("refreshToken").value
    _assert_unauthorized(client.get("/notes", headers={"Authorization": f"Bearer {refresh}"}))


def test_expired_access_token(app, client):
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    token = jwt.encode(
        {
            "sub": "user-1",
            "email": "a@b.com",
            "iat": int(past.timestamp()),
            "exp": int((past + timedelta(hours=1)).timestamp()),
            "type": "access",
        },
        app.config["JWT_ACCESS_SECRET"],
        algorithm="HS256",
    )
    _assert_unauthorized(client.get("/notes", headers={"Authorization": f"Bearer {token}"}))


def test_token_signed_with_other_secret(client):
    token = jwt.encode(
        {"sub": "user-1", "iat": 0, "exp": 2**31, "type": "access"},
        "some-other-secret",
        algorithm="HS256",
    )
    _assert_unauthorized(client.get("/me", headers={"Authorization": f"Bearer {token}"}))


def test_me_for_deleted_user(app, client):
    # A valid token for a user id that no longer exists
    token = jwt.encode(
        {"sub": "missing-user", "iat": 0, "exp": 2**31, "type": "access"},
        app.config["JWT_ACCESS_SECRET"],
        algorithm="HS256",
    )
    response = client.get("/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 404
    assert response.get_json()["error"]["code"] == "NOT_FOUND"
