from __future__ import annotations

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    ExpiredOrInvalidTokenError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)

STATUS_CODES: dict[type[DomainError], int] = {
    ValidationError: 400,
    ExpiredOrInvalidTokenError: 400,
    AuthenticationError: 401,
    AuthorizationError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    UpstreamError: 502,
}


def status_for(error: DomainError) -> int:
    for cls in type(error).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 400


def register(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        code = status_for(e)
        if code >= 500:
            app.logger.error("Upstream failure: %s", e)
        return jsonify({"message": str(e)}), code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        app.logger.exception("Unhandled error")
        return jsonify({"message": "Server error"}), 500
