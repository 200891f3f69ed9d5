from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
import logging

from services.results import AuthError, ErrorKind

# Token failures never say why the token was refused
UNAUTHORIZED = ("UNAUTHORIZED", "Unauthorized", 401)

AUTH_ERRORS = {
    ErrorKind.INVALID_CREDENTIALS: ("UNAUTHORIZED", "Invalid credentials", 401),
    ErrorKind.ACCOUNT_LOCKED: ("ACCOUNT_LOCKED", "Account is locked due to too many failed login attempts", 423),
    ErrorKind.TOKEN_MALFORMED: UNAUTHORIZED,
    ErrorKind.TOKEN_EXPIRED: UNAUTHORIZED,
    ErrorKind.TOKEN_REVOKED: UNAUTHORIZED,
    ErrorKind.SESSION_NOT_FOUND: ("NOT_FOUND", "Session not found or already revoked", 404),
    ErrorKind.RATE_LIMITED: ("RATE_LIMITED", "Too many requests", 429),
}


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def auth_error_response(err: AuthError):
    """Map a core failure onto the error envelope."""
    error, message, status = AUTH_ERRORS[err.kind]
    details = None
    if err.kind is ErrorKind.ACCOUNT_LOCKED and err.until is not None:
        until = err.until.isoformat() + "Z"
        message = f"{message}. Try again after {until}"
        details = {"locked_until": until}
    return error_response(error, message, status, details=details)


def register_error_handlers(app):
    # 400 Bad Request (generic)
    @app.errorhandler(400)
    def bad_request(e):
        if current_app and current_app.debug:
            logging.exception("Unhandled exception", exc_info=e)
        message = getattr(e, "description", "Bad request")
        return error_response("BAD_REQUEST", message, 400)

    @app.errorhandler(401)
    def unauthorized(e):
        return error_response(*UNAUTHORIZED)

    @app.errorhandler(403)
    def forbidden(e):
        message = getattr(e, "description", "Forbidden")
        return error_response("FORBIDDEN", message, 403)

    # 404 Not Found
    @app.errorhandler(404)
    def not_found(e):
        if current_app and current_app.debug:
            logging.exception("Unhandled exception", exc_info=e)
        return error_response("NOT_FOUND", "Resource not found", 404)

    # 409 Conflict
    @app.errorhandler(409)
    def conflict(e):
        if current_app and current_app.debug:
            logging.exception("Unhandled exception", exc_info=e)
        message = getattr(e, "description", "Conflict")
        return error_response("CONFLICT", message, 409)

    # 422 Unprocessable Entity (validation)
    @app.errorhandler(422)
    def unprocessable(e):
        if current_app and current_app.debug:
            logging.exception("Unhandled exception", exc_info=e)
        message = getattr(e, "description", "Unprocessable entity")
        return error_response("VALIDATION_ERROR", message, 422)

    @app.errorhandler(429)
    def too_many_requests(e):
        return error_response(*AUTH_ERRORS[ErrorKind.RATE_LIMITED])

    # Marshmallow validation errors map to 422
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        return error_response("VALIDATION_ERROR", "Invalid input", 422, details=err.messages)

    # Integrity errors (unique constraints, FK violations, check constraints)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        message = str(getattr(err, "orig", err))
        lower_msg = message.lower()
        if current_app and current_app.debug:
            logging.exception("Unhandled exception", exc_info=err)
        if "unique constraint" in lower_msg or "unique violation" in lower_msg:
            return error_response("CONFLICT", "Unique constraint violated.", 409)
        return error_response("BAD_REQUEST", "Integrity error.", 400)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        name = (err.name or "Bad Request").upper().replace(" ", "_")
        return error_response(name, err.description, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        # In dev, include exception details to speed up debugging
        details = None
        logging.exception("Unhandled exception", exc_info=err)
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
