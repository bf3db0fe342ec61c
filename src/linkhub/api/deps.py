from __future__ import annotations

import logging
from threading import Lock
from typing import Awaitable, Callable, Optional, TypeVar

from fastapi import Depends, Header, Request, Response
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from linkhub.core.config import settings
from linkhub.core.errors import MalformedRequest, RateLimited, Unauthorized
from linkhub.db.models import User
from linkhub.db.session import get_db
from linkhub.services.auth_service import resolve_session
from linkhub.services.rate_limiter import RateLimitResult, RateLimitStore, build_rate_limit_store

logger = logging.getLogger(__name__)

RATE_LIMIT_HEADER = "X-RateLimit-Remaining"

ModelT = TypeVar("ModelT", bound=BaseModel)

_store: Optional[RateLimitStore] = None
_store_lock = Lock()


def get_rate_limit_store() -> RateLimitStore:
    """One limiter store per process, created on first use."""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = build_rate_limit_store(settings)
    return _store


def get_client_ip(request: Request) -> str:
    # Simple local-dev safe approach.
    # If behind a proxy in real deployments, you'd use X-Forwarded-For carefully.
    return request.client.host if request.client else "unknown"


def get_session_token(
    request: Request,
    authorization: str | None = Header(default=None),
) -> Optional[str]:
    """Bearer token if present, otherwise the session cookie."""
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return request.cookies.get(settings.session_cookie_name)


def get_current_user(
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(get_session_token),
) -> User:
    user = resolve_session(db, token)
    if user is None:
        # same error for missing, unknown and expired sessions
        raise Unauthorized()
    return user


def set_rate_limit_header(response: Response, result: RateLimitResult) -> None:
    response.headers[RATE_LIMIT_HEADER] = str(result.remaining)


def _enforce(request: Request, store: RateLimitStore, key: str, limit: int, window_seconds: int) -> RateLimitResult:
    result = store.check(key, limit, window_seconds * 1000)

    # error handlers read this to put the header on 4xx responses too
    request.state.rate_limit_remaining = result.remaining

    if not result.allowed:
        logger.warning("Rate limit exceeded for %s", key, extra={"path": request.url.path})
        raise RateLimited()
    return result


def links_rate_limiter(operation: str, write: bool = True) -> Callable[..., RateLimitResult]:
    """
    Per-user fixed-window limiter for the link endpoints, keyed
    "links-{operation}-{user_id}".
    Limits are read from settings on every request so tests and deployments
    can change them without reload.
    """

    def dependency(
        request: Request,
        user: User = Depends(get_current_user),
        store: RateLimitStore = Depends(get_rate_limit_store),
    ) -> RateLimitResult:
        limit = settings.links_write_limit if write else settings.links_read_limit
        return _enforce(
            request, store, f"links-{operation}-{user.id}", limit, settings.links_window_seconds
        )

    return dependency


def track_rate_limiter(
    request: Request,
    store: RateLimitStore = Depends(get_rate_limit_store),
) -> RateLimitResult:
    """Per-IP limiter for public click tracking."""
    ip = get_client_ip(request)
    return _enforce(
        request, store, f"links-track-{ip}", settings.track_limit, settings.track_window_seconds
    )


def json_body(model: type[ModelT]) -> Callable[..., Awaitable[ModelT]]:
    """
    Read and validate the JSON body as a dependency instead of a body
    parameter, so it runs in declaration order: routes list it after the
    session and limiter dependencies, and a bad body on an unauthenticated
    or throttled request still gets 401 or 429.
    """

    async def dependency(request: Request) -> ModelT:
        try:
            data = await request.json()
        except ValueError as exc:
            raise MalformedRequest() from exc
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.info("Malformed request on %s: %s", request.url.path, exc.errors())
            raise MalformedRequest() from exc

    return dependency
