"""API error types and the JSON error handlers registered on the app."""

import logging
import traceback

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

from extensions import db

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400


class AuthenticationError(ApiError):
    status_code = 401


class AuthorizationError(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


def error_response(message: str, status_code: int, exc: BaseException | None = None):
    stack = None
    if exc is not None and current_app.config.get("APP_ENV") != "production":
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    response = jsonify(message=message, stack=stack)
    response.status_code = status_code
    return response


def register_error_handlers(app) -> None:
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        db.session.rollback()
        if isinstance(err, AuthorizationError):
            logger.warning("Forbidden: %s", err.message)
        return error_response(err.message, err.status_code, err)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        db.session.rollback()
        return error_response(err.description or err.name, err.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        db.session.rollback()
        logger.exception("Unhandled error")
        message = "Internal server error"
        if current_app.config.get("APP_ENV") != "production":
            message = str(err) or message
        return error_response(message, 500, err)
