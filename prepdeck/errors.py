"""Typed application errors shared by the auth, store and repository layers.

Handlers never build error responses by hand: they let an ``AppError``
propagate and the exception handlers registered in ``prepdeck.main`` map its
``code`` to an HTTP status.
"""

from typing import Any, Optional


class AppError(Exception):
    code = "INTERNAL"
    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if code is not None:
            self.code = code

    def to_dict(self) -> dict:
        body = {"error": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class Unauthenticated(AppError):
    code = "UNAUTHENTICATED"
    status_code = 401


class Forbidden(AppError):
    code = "FORBIDDEN"
    status_code = 403


class NotFound(AppError):
    code = "NOT_FOUND"
    status_code = 404


class BadRequest(AppError):
    code = "BAD_REQUEST"
    status_code = 400


class SchemaViolation(BadRequest):
    """A document or request body failed schema validation."""


class InternalError(AppError):
    code = "INTERNAL"
    status_code = 500


class ConcurrentModification(InternalError):
    """An optimistic write kept losing to concurrent writers."""


class Conflict(AppError):
    code = "CONFLICT"
    status_code = 409
