from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Sequence

from starlette.exceptions import HTTPException

if TYPE_CHECKING:
    from linkhub.core.validation import FieldError


@dataclass(frozen=True)
class ApiError:
    code: str
    message: str


STATUS_TO_ERROR_CODE: dict[int, str] = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    429: "RATE_LIMITED",
    500: "INTERNAL_SERVER_ERROR",
}


class LinkHubError(Exception):
    """
    Base class for errors that map onto a JSON error response.

    Body shape: {"error": <message>, "code": <code>}; subclasses may add keys.
    """

    status_code = 500
    code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code}


class Unauthorized(LinkHubError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class ValidationFailed(LinkHubError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Validation failed"

    def __init__(self, errors: Sequence[FieldError]) -> None:
        super().__init__()
        self.errors = list(errors)

    def to_response(self) -> dict[str, Any]:
        body = super().to_response()
        body["errors"] = [e.to_dict() for e in self.errors]
        return body


class MalformedRequest(LinkHubError):
    status_code = 400
    code = "BAD_REQUEST"
    default_message = "Invalid request body"


class NotFound(LinkHubError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class Conflict(LinkHubError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Conflict"


class RateLimited(LinkHubError):
    status_code = 429
    code = "RATE_LIMITED"
    default_message = "Too many requests"


class StoreError(LinkHubError):
    """The persistence call itself failed; the store's message is passed through."""

    status_code = 500
    code = "STORE_ERROR"
    default_message = "Storage error"


def normalize_http_exception(exc: HTTPException) -> ApiError:
    """
    Converts HTTPException.detail into (code, message).

    Supports:
    - detail as str -> message=str, code inferred from status
    - detail as {"code": "...", "message": "..."} -> use directly
    - detail as {"error": {"code": "...", "message": "..."}} -> use directly
    """
    status = exc.status_code
    default_code = STATUS_TO_ERROR_CODE.get(status, "ERROR")

    detail: Any = exc.detail
    if isinstance(detail, dict):
        if "error" in detail and isinstance(detail["error"], dict):
            inner = detail["error"]
            if "code" in inner and "message" in inner:
                return ApiError(code=str(inner["code"]), message=str(inner["message"]))
        if "code" in detail and "message" in detail:
            return ApiError(code=str(detail["code"]), message=str(detail["message"]))

    # fallback
    msg = detail if isinstance(detail, str) else "Request failed"
    return ApiError(code=default_code, message=str(msg))
