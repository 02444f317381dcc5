from __future__ import annotations

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)

STATUS_BY_ERROR = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 400),
)


def error_response(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def register_error_handlers(app: Flask) -> None:
    """Map domain errors to short JSON messages; anything else is a 500."""

    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        for error_type, status in STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                if status >= 401:
                    app.logger.info("%s: %s", type(exc).__name__, exc)
                return error_response(str(exc), status)
        return error_response(str(exc), 400)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return error_response(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        app.logger.exception("Unhandled error")
        if app.config.get("DEBUG"):
            return error_response(f"Internal error: {exc}", 500)
        return error_response("Internal server error", 500)
