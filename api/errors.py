import logging

from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError as SchemaValidationError
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto the failure envelope."""
    code = "ERROR"
    status = 400
    default_message = "Something went wrong!"

    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details


class ValidationError(ApiError):
    code = "VALIDATION_ERROR"
    status = 422
    default_message = "Invalid input"


class ConflictError(ApiError):
    code = "CONFLICT"
    status = 409
    default_message = "Conflict"


class NotFoundError(ApiError):
    code = "NOT_FOUND"
    status = 404
    default_message = "Resource not found"


class InvalidCredentialsError(ApiError):
    code = "INVALID_CREDENTIALS"
    status = 401
    default_message = "Email or password is invalid!"


class InvalidTokenError(ApiError):
    code = "INVALID_TOKEN"
    status = 401
    default_message = "Invalid refresh token!"


class ExpiredError(ApiError):
    code = "TOKEN_EXPIRED"
    status = 401
    default_message = "Refresh token expired! Please login again."


class UnauthorizedError(ApiError):
    code = "UNAUTHORIZED"
    status = 401
    default_message = "Unauthorized"


def success_response(data: dict, status: int = 200):
    return jsonify({"ok": True, "data": data}), status


def error_response(code: str, message: str, status: int, details: dict | None = None):
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    return jsonify({"ok": False, "error": error}), status


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        logger.info("%s: %s", err.code, err.message)
        return error_response(err.code, err.message, err.status, details=err.details)

    # 404 Not Found (unknown routes)
    @app.errorhandler(404)
    def not_found(e):
        return error_response("NOT_FOUND", "Resource not found", 404)

    # Marshmallow validation errors map to 422
    @app.errorhandler(SchemaValidationError)
    def handle_validation_error(err: SchemaValidationError):
        # err.messages contains field-level details
        return error_response("VALIDATION_ERROR", "Invalid input", 422, details=err.messages)

    # Integrity errors (unique constraints, FK violations, check constraints)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        message = str(getattr(err, "orig", err))
        lower_msg = message.lower()
        logger.warning("Integrity error: %s", message)
        if "unique constraint" in lower_msg or "unique violation" in lower_msg:
            return error_response("CONFLICT", "Unique constraint violated.", 409)
        return error_response("BAD_REQUEST", "Integrity error.", 400)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response("BAD_REQUEST", err.description, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        details = None
        # In dev, include exception details to speed up debugging
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
