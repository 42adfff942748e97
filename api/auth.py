"""
Authentication blueprint:
- POST /signup
- POST /login
- POST /logout
- POST /refresh-token

The refresh token only ever travels in the HttpOnly `refreshToken` cookie;
JSON bodies carry the access token and the user profile.
Every endpoint needs the x-device-info header (JSON device fingerprint).
"""
from __future__ import annotations

from flask import Blueprint, request, current_app, after_this_request

from api.errors import ApiError, success_response
from models.schemas.user import UserOutSchema
from services import auth as auth_service

bp = Blueprint("auth", __name__)

user_out_schema = UserOutSchema()


def _device_info() -> dict:
    header = current_app.config.get("DEVICE_INFO_HEADER", "x-device-info")
    return auth_service.load_device_info(request.headers.get(header), request.remote_addr)


def _refresh_cookie() -> str | None:
    return request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])


def _set_refresh_cookie(response, token: str, samesite: str = "Strict"):
    response.set_cookie(
        current_app.config["REFRESH_COOKIE_NAME"],
        token,
        max_age=int(current_app.config["REFRESH_TOKEN_EXPIRES"].total_seconds()),
        httponly=True,
        secure=current_app.config["COOKIE_SECURE"],
        samesite=samesite,
        path="/",
    )
    return response


def _clear_refresh_cookie(response):
    response.delete_cookie(
        current_app.config["REFRESH_COOKIE_NAME"],
        path="/",
        httponly=True,
        secure=current_app.config["COOKIE_SECURE"],
        samesite="Strict",
    )
    return response


def _session_response(result, status: int, samesite: str = "Strict"):
    response, status = success_response(
        {"accessToken": result.access_token, "user": user_out_schema.dump(result.user)},
        status,
    )
    _set_refresh_cookie(response, result.refresh_token, samesite=samesite)
    return response, status


@bp.post("/signup")
def signup():
    """
    Register a new user and start a session on this device.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: header
        name: x-device-info
        type: string
        required: true
        description: JSON device fingerprint, e.g. {"deviceId": "..."}
      - in: body
        name: body
        schema:
          type: object
          properties:
            email: { type: string }
            username: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created (sets the refreshToken cookie)
      409:
        description: Email or username already registered
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    device = _device_info()
    result = auth_service.signup(
        payload.get("email"), payload.get("username"), payload.get("password"), device
    )
    return _session_response(result, 201)


@bp.post("/login")
def login():
    """
    Login with email or username; replaces this device's session only.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: header
        name: x-device-info
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            usernameOrEmail: { type: string }
            password: { type: string }
    responses:
      201:
        description: OK (returns accessToken, sets the refreshToken cookie)
      401:
        description: Invalid credentials
      404:
        description: Unknown user
    """
    payload = request.get_json(silent=True) or {}
    device = _device_info()
    result = auth_service.login(payload.get("usernameOrEmail"), payload.get("password"), device)
    return _session_response(result, 201, samesite="Lax")


@bp.post("/logout")
def logout():
    """
    Logout this device: deletes its refresh token record and clears the cookie.
    ---
    tags:
      - Auth
    parameters:
      - in: header
        name: x-device-info
        type: string
        required: true
    responses:
      200:
        description: Logged out
      401:
        description: Missing or invalid refresh token
    """
    try:
        auth_service.logout(_refresh_cookie(), _device_info())
    except ApiError:
        after_this_request(_clear_refresh_cookie)
        raise
    response, status = success_response({"message": "Logged out successfully!"})
    _clear_refresh_cookie(response)
    return response, status


@bp.post("/refresh-token")
def refresh_token():
    """
    Exchange the refresh cookie for a new access token; the cookie is rotated.
    ---
    tags:
      - Auth
    parameters:
      - in: header
        name: x-device-info
        type: string
        required: true
    responses:
      200:
        description: OK (returns accessToken, rotates the refreshToken cookie)
      401:
        description: Invalid, reused or expired refresh token
      404:
        description: User no longer exists
    """
    try:
        result = auth_service.refresh(_refresh_cookie(), _device_info())
    except ApiError:
        after_this_request(_clear_refresh_cookie)
        raise
    return _session_response(result, 200)
