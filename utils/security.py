"""
security helpers:
- Argon2 hashing via argon2-cffi, for passwords and for stored refresh tokens
- access/refresh JWT issuing and verification via PyJWT
- JTI generation so every issued token is unique
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Dict, Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError

from flask import current_app

from api.errors import InvalidTokenError

ACCESS = "access"
REFRESH = "refresh"

ph = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


# Refresh tokens are stored the same way passwords are
hash_token = hash_password
verify_token_hash = verify_password


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _secret(kind: str) -> str:
    if kind == ACCESS:
        return current_app.config["JWT_ACCESS_SECRET"]
    if kind == REFRESH:
        return current_app.config["JWT_REFRESH_SECRET"]
    raise ValueError(f"Unknown token kind: {kind}")


def _lifetime(kind: str):
    if kind == ACCESS:
        return current_app.config["ACCESS_TOKEN_EXPIRES"]
    return current_app.config["REFRESH_TOKEN_EXPIRES"]


def _issue(user, kind: str) -> str:
    now = _now()
    payload = {
        "iss": current_app.config.get("JWT_ISSUER", "notes-api"),
        "sub": str(user.id),
        "email": user.email,
        "iat": int(now.timestamp()),
        "exp": int((now + _lifetime(kind)).timestamp()),
        "type": kind,
        "jti": generate_jti(),
    }
    return jwt.encode(payload, _secret(kind), algorithm=current_app.config["JWT_ALGORITHM"])


def issue_access_token(user) -> str:
    """Short-lived bearer token carrying the user id and email."""
    return _issue(user, ACCESS)


def issue_refresh_token(user) -> str:
    """Long-lived token, only ever delivered in the refresh cookie."""
    return _issue(user, REFRESH)


def verify_token(token: str, kind: str = ACCESS, verify_exp: bool = True) -> Dict[str, Any]:
    """
    Decode and validate a JWT of the given kind with that kind's secret.
    Raises InvalidTokenError on a bad signature, expiry, malformed input or a
    type claim that does not match. With verify_exp=False an expired but
    correctly signed token still yields its claims.
    """
    try:
        decoded = jwt.decode(
            token,
            _secret(kind),
            algorithms=[current_app.config["JWT_ALGORITHM"]],
            options={"require": ["exp", "iat", "sub"], "verify_exp": verify_exp},
        )
    except jwt.ExpiredSignatureError as exc:
        raise InvalidTokenError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError(f"Invalid token: {exc}") from exc

    if decoded.get("type") != kind:
        raise InvalidTokenError("Wrong token type")
    return decoded


def refresh_expiry() -> datetime:
    """Absolute expiry stored alongside a freshly issued refresh token."""
    return _now() + current_app.config["REFRESH_TOKEN_EXPIRES"]
