"""
Authentication service: signup, login, logout and refresh.

Every session is scoped to a (user, device) pair. A refresh token is stored
only as an argon2 hash, is single-use, and is rotated on every refresh.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass

from marshmallow import ValidationError as SchemaValidationError

from api.errors import (
    ConflictError,
    ExpiredError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
)
from models import storage
from models import credential_store, session_store
from models.refresh_token import RefreshToken, SessionState
from models.schemas.device import DeviceInfoSchema
from models.schemas.user import LoginSchema, SignupSchema, EMAIL_PATTERN
from models.user import User
from utils.security import (
    REFRESH,
    hash_password,
    hash_token,
    issue_access_token,
    issue_refresh_token,
    refresh_expiry,
    verify_password,
    verify_token,
    verify_token_hash,
)

logger = logging.getLogger(__name__)

signup_schema = SignupSchema()
login_schema = LoginSchema()
device_info_schema = DeviceInfoSchema()

_email_re = re.compile(EMAIL_PATTERN)


@dataclass
class AuthResult:
    access_token: str
    refresh_token: str
    user: User


def load_device_info(raw, ip_address: str | None = None) -> dict:
    """Parse the x-device-info header (JSON string or dict) into column values."""
    if raw is None or raw == "":
        raise ValidationError("Missing device info", details={"x-device-info": ["Header is required."]})
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise ValidationError("Malformed device info", details={"x-device-info": ["Not valid JSON."]})
    if not isinstance(raw, dict):
        raise ValidationError("Malformed device info", details={"x-device-info": ["Must be a JSON object."]})
    try:
        device = device_info_schema.load(raw)
    except SchemaValidationError as err:
        raise ValidationError("Invalid device info", details=err.messages)
    device["ip_address"] = ip_address
    return device


def _load(schema, data: dict, message: str) -> dict:
    try:
        return schema.load(data)
    except SchemaValidationError as err:
        raise ValidationError(message, details=err.messages)


def _start_session(user: User, device: dict) -> AuthResult:
    """Issue a token pair and stage the hashed refresh record; caller commits."""
    access_token = issue_access_token(user)
    refresh_token = issue_refresh_token(user)
    session_store.add(
        user_id=user.id,
        token_hash=hash_token(refresh_token),
        expires_at=refresh_expiry(),
        device=device,
    )
    return AuthResult(access_token=access_token, refresh_token=refresh_token, user=user)


def _verified_record(refresh_token: str | None, device: dict) -> tuple[dict, RefreshToken]:
    """Verify the cookie token and find the live record for (user, device)."""
    if not refresh_token:
        raise InvalidTokenError()
    claims = verify_token(refresh_token, REFRESH)
    record = session_store.find_for_device(claims["sub"], device["device_id"])
    if record is None:
        raise InvalidTokenError()
    return claims, record


def _drop_expired_session(refresh_token: str, device_id: str) -> None:
    """
    Log a device out after a rejected refresh token, but only the session that
    token belongs to. Unsigned or forged tokens name no one and remove nothing.
    """
    try:
        stale = verify_token(refresh_token, REFRESH, verify_exp=False)
    except InvalidTokenError:
        logger.warning("Rejected unverifiable refresh token on device %s", device_id)
        return

    record = session_store.find_for_device(stale["sub"], device_id)
    if record is None or not verify_token_hash(refresh_token, record.token_hash):
        logger.warning("Rejected expired refresh token for user %s device %s", stale["sub"], device_id)
        return
    session_store.retire(record, SessionState.EXPIRED)
    storage.save()
    logger.warning("Expired refresh token logged out user %s on device %s", stale["sub"], device_id)


def signup(email, username, password, device_info: dict) -> AuthResult:
    data = _load(
        signup_schema,
        {"email": email, "username": username, "password": password},
        "Invalid email, username or password!",
    )
    if credential_store.email_taken(data["email"]):
        raise ConflictError("User with that email already exists!")
    if credential_store.username_taken(data["username"]):
        raise ConflictError("User with that username already exists!")

    user = credential_store.create_user(
        email=data["email"],
        username=data["username"],
        password_hash=hash_password(data["password"]),
    )

    # A brand-new user has no sessions; clear anything stale regardless
    session_store.revoke_for_user(user.id)
    result = _start_session(user, device_info)
    storage.save()
    logger.info("Signed up user %s on device %s", user.id, device_info["device_id"])
    return result


def login(username_or_email, password, device_info: dict) -> AuthResult:
    data = _load(
        login_schema,
        {"usernameOrEmail": username_or_email, "password": password},
        "Invalid email, username or password!",
    )
    identifier = data["username_or_email"]
    if "@" in identifier and not _email_re.match(identifier):
        raise ValidationError("Invalid email, username or password!")

    user = credential_store.find_by_email_or_username(identifier)
    if user is None:
        raise NotFoundError("User with that email or username does not exist!")
    if not verify_password(data["password"], user.password_hash):
        logger.warning("Failed login for user %s", user.id)
        raise InvalidCredentialsError()

    # Only this device's session is replaced; other devices stay logged in
    session_store.revoke_for_user_device(user.id, device_info["device_id"])
    result = _start_session(user, device_info)
    storage.save()
    logger.info("Logged in user %s on device %s", user.id, device_info["device_id"])
    return result


def logout(refresh_token: str | None, device_info: dict) -> None:
    claims, record = _verified_record(refresh_token, device_info)
    if not verify_token_hash(refresh_token, record.token_hash):
        logger.warning("Logout with mismatched refresh token for user %s device %s",
                       claims["sub"], device_info["device_id"])
        raise InvalidTokenError()

    session_store.retire(record, SessionState.REVOKED)
    storage.save()
    logger.info("Logged out user %s on device %s", claims["sub"], device_info["device_id"])


def refresh(refresh_token: str | None, device_info: dict) -> AuthResult:
    device_id = device_info["device_id"]
    if not refresh_token:
        raise InvalidTokenError()
    try:
        claims = verify_token(refresh_token, REFRESH)
    except InvalidTokenError:
        _drop_expired_session(refresh_token, device_id)
        raise InvalidTokenError()

    record = session_store.find_for_device(claims["sub"], device_id)
    if record is None:
        raise InvalidTokenError()

    user = credential_store.get_user(record.user_id)
    if user is None:
        session_store.retire(record, SessionState.REVOKED)
        storage.save()
        raise NotFoundError("User not found!")

    if not verify_token_hash(refresh_token, record.token_hash):
        logger.warning("Refresh with mismatched token for user %s device %s", user.id, device_id)
        raise InvalidTokenError()

    if record.is_expired():
        session_store.retire(record, SessionState.EXPIRED)
        storage.save()
        logger.info("Refresh session expired for user %s device %s", user.id, device_id)
        raise ExpiredError()

    # Rotate: the old record goes and the new one arrives in one commit
    session_store.retire(record, SessionState.ROTATED)
    result = _start_session(user, device_info)
    storage.save()
    logger.info("Rotated refresh token for user %s on device %s", user.id, device_id)
    return result


def current_user(user_id: str) -> User:
    user = credential_store.get_user(user_id)
    if user is None:
        raise NotFoundError("No user found!")
    return user
