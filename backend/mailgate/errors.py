"""
Error taxonomy for the public mail lookup API.

Each error is an HTTPException carrying a stable machine-readable code in its
detail, so callers can branch on the cause without parsing the message:

    Unauthorized     401  UNAUTHORIZED
    Forbidden        403  FORBIDDEN
    NotFound         404  NOT_FOUND
    InvalidRequest   400  INVALID_REQUEST
    UpstreamFailure  500  UPSTREAM_FAILURE

Sync failures are absorbed by the sync trigger and never show up here.
"""

from typing import Any, Optional

from fastapi import HTTPException


class PublicMailError(HTTPException):
    """Base class: subclasses set status, code and default message."""

    http_status: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal error"

    def __init__(self, message: Optional[str] = None, errors: Optional[Any] = None):
        self.message = message or self.default_message
        self.errors = errors
        detail = {"code": self.code, "message": self.message}
        if errors is not None:
            detail["errors"] = errors
        super().__init__(status_code=self.http_status, detail=detail)


class Unauthorized(PublicMailError):
    # One message for unknown email, wrong password and lookup faults alike
    http_status = 401
    code = "UNAUTHORIZED"
    default_message = "Invalid email or password"


class Forbidden(PublicMailError):
    http_status = 403
    code = "FORBIDDEN"
    default_message = "Email does not belong to this account"


class NotFound(PublicMailError):
    http_status = 404
    code = "NOT_FOUND"
    default_message = "Email not found"


class InvalidRequest(PublicMailError):
    http_status = 400
    code = "INVALID_REQUEST"
    default_message = "Invalid request"


class UpstreamFailure(PublicMailError):
    http_status = 500
    code = "UPSTREAM_FAILURE"
    default_message = "Failed to get emails"
