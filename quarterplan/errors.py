"""Domain error system + RFC7807 handler registration.

Service functions raise ``DomainError`` subclasses; the handlers registered
here turn them (and werkzeug HTTP exceptions) into problem+json responses.
"""
from __future__ import annotations

import traceback
import uuid
from collections.abc import Callable
from typing import Any

from flask import Flask, request
from werkzeug.exceptions import HTTPException
from werkzeug.wrappers.response import Response

from .api_types import FieldError
from .http_errors import (
    bad_request,
    conflict,
    internal_server_error,
    method_not_allowed,
    not_found,
    unprocessable_entity,
)


class DomainError(Exception):
    def __init__(self, status: int, code: str, detail: str | None = None, **extra: Any):
        self.status = status
        self.code = code
        self.detail = detail or code
        self.extra = extra
        super().__init__(self.detail)


class BadRequestError(DomainError):
    def __init__(self, detail: str = "bad_request", **extra: Any):
        super().__init__(400, "bad_request", detail, **extra)


class NotFoundError(DomainError):
    def __init__(self, detail: str = "not_found", **extra: Any):
        super().__init__(404, "not_found", detail, **extra)


class ConflictError(DomainError):
    def __init__(self, detail: str = "conflict", **extra: Any):
        super().__init__(409, "conflict", detail, **extra)


class ValidationError(DomainError):
    def __init__(self, errors: list[FieldError], detail: str = "validation_error", **extra: Any):
        super().__init__(422, "validation_error", detail, **extra)
        self.errors = errors


_STATUS_HELPERS: dict[int, Callable[..., Response]] = {
    400: bad_request,
    404: not_found,
    405: method_not_allowed,
    409: conflict,
}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _h_domain(err: DomainError) -> Response:
        if isinstance(err, ValidationError):
            return unprocessable_entity(err.errors, detail=err.detail, **err.extra)
        helper = _STATUS_HELPERS.get(err.status, bad_request)
        return helper(detail=err.detail, **err.extra)

    @app.errorhandler(HTTPException)
    def _h_http(ex: HTTPException) -> Response:
        status = ex.code or 500
        helper = _STATUS_HELPERS.get(status)
        if helper:
            return helper(detail=ex.description)
        if status >= 500:
            return internal_server_error()
        return bad_request(detail=str(ex.description))

    @app.errorhandler(Exception)
    def _h_exception(ex: Exception) -> Response:
        incident_id = str(uuid.uuid4())
        app.logger.error(
            "Unhandled exception incident_id=%s path=%s\n%s",
            incident_id,
            request.path,
            traceback.format_exc(),
        )
        return internal_server_error(incident_id=incident_id)


__all__ = [
    "DomainError",
    "BadRequestError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "register_error_handlers",
]
