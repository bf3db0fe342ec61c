"""Global exception handlers.

Every failure leaves as JSON with at least {"error", "code"}:
    - LinkHubError        -> its own status and body
    - RequestValidationError (bad JSON, wrong types) -> 400 generic message
    - HTTPException       -> normalized (unknown routes, wrong methods)
    - Exception           -> 500, details only in the log
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from linkhub.api.deps import RATE_LIMIT_HEADER
from linkhub.core.errors import LinkHubError, MalformedRequest, RateLimited, normalize_http_exception

logger = logging.getLogger(__name__)


def _rate_limit_headers(request: Request, exc: Exception) -> dict[str, str]:
    if isinstance(exc, RateLimited):
        return {RATE_LIMIT_HEADER: "0"}
    remaining = getattr(request.state, "rate_limit_remaining", None)
    if remaining is None:
        return {}
    return {RATE_LIMIT_HEADER: str(remaining)}


def _error_response(request: Request, exc: LinkHubError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response(),
        headers=_rate_limit_headers(request, exc),
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LinkHubError)
    async def linkhub_error_handler(request: Request, exc: LinkHubError):
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "%s on %s: %s", type(exc).__name__, request.url.path, exc.message,
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return _error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info("Malformed request on %s: %s", request.url.path, exc.errors())
        return _error_response(request, MalformedRequest())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        err = normalize_http_exception(exc)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": err.message, "code": err.code},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception on %s: %s", request.url.path, exc,
            exc_info=True, extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "code": "INTERNAL_SERVER_ERROR"},
        )
