"""Tests for token issuing, verification and hashing."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import jwt
import pytest

from api.errors import InvalidTokenError
from utils.security import (
    ACCESS,
    REFRESH,
    hash_password,
    hash_token,
    issue_access_token,
    issue_refresh_token,
    verify_password,
    verify_token,
    verify_token_hash,
)

USER = SimpleNamespace(id="user-1", email="a@b.com")


class TestTokenIssuer:

    def test_access_token_claims(self, app):
        with app.app_context():
            claims = verify_token(issue_access_token(USER), ACCESS)
        assert claims["sub"] == "user-1"
        assert claims["email"] == "a@b.com"
        assert claims["type"] == "access"
        assert claims["exp"] - claims["iat"] == 3600

    def test_refresh_token_lifetime_is_seven_days(self, app):
        with app.app_context():
            claims = verify_token(issue_refresh_token(USER), REFRESH)
        assert claims["exp"] - claims["iat"] == 7 * 24 * 3600
        assert claims["type"] == "refresh"

    def test_every_token_is_unique(self, app):
        with app.app_context():
            assert issue_access_token(USER) != issue_access_token(USER)

    def test_access_token_is_not_a_refresh_token(self, app):
        with app.app_context():
            with pytest.raises(InvalidTokenError):
                verify_token(issue_access_token(USER), REFRESH)

    def test_refresh_token_is_not_an_access_token(self, app):
        with app.app_context():
            with pytest.raises(InvalidTokenError):
                verify_token(issue_refresh_token(USER), ACCESS)

    def test_type_claim_checked_even_with_matching_secret(self, app):
        with app.app_context():
            forged = jwt.encode(
                {"sub": "user-1", "iat": 0, "exp": 2**31, "type": "refresh"},
                app.config["JWT_ACCESS_SECRET"],
                algorithm="HS256",
            )
            with pytest.raises(InvalidTokenError, match="Wrong token type"):
                verify_token(forged, ACCESS)

    def test_expired_token_rejected(self, app):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        with app.app_context():
            token = jwt.encode(
                {
                    "sub": "user-1",
                    "iat": int(past.timestamp()),
                    "exp": int((past + timedelta(hours=1)).timestamp()),
                    "type": "access",
                },
                app.config["JWT_ACCESS_SECRET"],
                algorithm="HS256",
            )
            with pytest.raises(InvalidTokenError, match="expired"):
                verify_token(token, ACCESS)
            assert verify_token(token, ACCESS, verify_exp=False)["sub"] == "user-1"

    def test_skipping_expiry_still_checks_signature(self, app):
        with app.app_context():
            forged = jwt.encode(
                {"sub": "user-1", "iat": 0, "exp": 1, "type": "refresh"},
                "not-the-secret",
                algorithm="HS256",
            )
            with pytest.raises(InvalidTokenError):
                verify_token(forged, REFRESH, verify_exp=False)

    def test_garbage_rejected(self, app):
        with app.app_context():
            with pytest.raises(InvalidTokenError):
                verify_token("not-a-jwt", ACCESS)


class TestHashing:

    def test_password_roundtrip(self):
        hashed = hash_password("secret1")
        assert hashed != "secret1"
        assert verify_password("secret1", hashed)
        assert not verify_password("secret2", hashed)

    def test_token_hash_mismatch(self):
        hashed = hash_token("token-one")
        assert verify_token_hash("token-one", hashed)
        assert not verify_token_hash("token-two", hashed)

    def test_malformed_hash_is_a_mismatch(self):
        assert not verify_token_hash("token-one", "not-an-argon2-hash")
