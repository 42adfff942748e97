"""Pytest configuration and fixtures for the Notes API tests."""

import json
import os

import pytest

os.environ["APP_ENV"] = "test"

from api import create_app  # noqa: E402

DEVICE_A = {
    "deviceId": "device-a",
    "deviceName": "laptop",
    "deviceType": "Desktop",
    "platform": "Linux x86_64",
    "userAgent": "pytest",
    "browser": "Unknown",
    "browserVersion": "Unknown",
}

DEVICE_B = {
    "deviceId": "device-b",
    "deviceName": "phone",
    "deviceType": "Mobile",
    "platform": "iPhone",
    "userAgent": "pytest Mobile",
    "browser": "Safari",
    "browserVersion": "17.0",
}

CREDENTIALS = {"email": "a@b.com", "username": "alice", "password": "secret1"}


def device_headers(device=None):
    return {"x-device-info": json.dumps(device or DEVICE_A)}


@pytest.fixture
def app():
    """Fresh app bound to its own in-memory database."""
    yield create_app("test")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_client(app):
    """Extra test clients, each with its own cookie jar (one per device)."""
    return app.test_client


@pytest.fixture
def signup(client):
    """
    Sign up a user and return the response.

    Usage:
        def test_something(signup):
            response = signup()
            token = response.get_json()["data"]["accessToken"]
    """
    def _signup(http=None, device=None, **overrides):
        body = {**CREDENTIALS, **overrides}
        return (http or client).post("/signup", json=body, headers=device_headers(device))

    return _signup


@pytest.fixture
def auth_headers(signup):
    response = signup()
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.get_json()['data']['accessToken']}"}
