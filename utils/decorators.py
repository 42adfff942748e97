from __future__ import annotations
from functools import wraps
import logging

from flask import request, g

from api.errors import InvalidTokenError, UnauthorizedError, error_response
from utils.security import ACCESS, verify_token

logger = logging.getLogger(__name__)


def _unauthorized():
    # Same body for every failure; callers cannot tell expired from malformed
    err = UnauthorizedError()
    return error_response(err.code, err.message, err.status)


def jwt_required():
    """
    Gate a view behind a valid access token. On success the decoded claims
    are on g.token_claims and the user id on g.current_user_id.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = request.headers.get("Authorization", "")
            if not auth.startswith("Bearer "):
                return _unauthorized()
            token = auth.split(" ", 1)[1].strip()
            if not token:
                return _unauthorized()
            try:
                decoded = verify_token(token, ACCESS)
            except InvalidTokenError as exc:
                logger.debug("Rejected bearer token: %s", exc.message)
                return _unauthorized()

            g.token_claims = decoded
            g.current_user_id = decoded["sub"]
            return fn(*args, **kwargs)

        return wrapper

    return decorator
