from __future__ import annotations
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional, Protocol

from redis import Redis
import time

from linkhub.core.config import Settings


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int


class RateLimitStore(Protocol):
    """
    Contract every limiter backend satisfies, so a shared counter service
    can replace the in-process one without touching call sites.
    """

    def check(self, key: str, limit: int, window_ms: int) -> RateLimitResult: ...

    def sweep(self) -> int: ...


def _now_ms() -> float:
    return time.time() * 1000


def _check_args(limit: int, window_ms: int) -> None:
    if limit < 1:
        raise ValueError("limit must be at least 1")
    if window_ms < 1:
        raise ValueError("window_ms must be at least 1")


@dataclass
class _Window:
    count: int
    reset_at_ms: float


class InMemoryRateLimitStore:
    """
    Fixed-window counter per key, held in process memory.

    Algorithm:
    - No record, or now past the reset time -> start a new window with count=1
    - count >= limit -> block, record unchanged
    - otherwise increment; remaining = limit - count

    Bursts of up to 2x limit are possible across a window boundary. Limits are
    only correct for a single process; multi-instance deployments need a
    shared backend such as RedisRateLimitStore.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock if clock is not None else _now_ms
        self._windows: dict[str, _Window] = {}
        self._lock = Lock()

    def check(self, key: str, limit: int, window_ms: int) -> RateLimitResult:
        _check_args(limit, window_ms)
        now = self._clock()

        with self._lock:
            record = self._windows.get(key)

            if record is None or now > record.reset_at_ms:
                self._windows[key] = _Window(count=1, reset_at_ms=now + window_ms)
                return RateLimitResult(allowed=True, remaining=limit - 1)

            if record.count >= limit:
                return RateLimitResult(allowed=False, remaining=0)

            record.count += 1
            return RateLimitResult(allowed=True, remaining=limit - record.count)

    def sweep(self) -> int:
        """Drop every record whose window has ended. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, w in self._windows.items() if now > w.reset_at_ms]
            for k in expired:
                del self._windows[k]
        return len(expired)

    def __len__(self) -> int:
        return len(self._windows)


FIXED_WINDOW_LUA = r"""
local key = KEYS[1]
local limit = tonumber(ARGV[1])
local window_ms = tonumber(ARGV[2])

local current = redis.call("GET", key)
if not current then
  redis.call("SET", key, 1, "PX", window_ms)
  return {1, limit - 1}
end

current = tonumber(current)
if current >= limit then
  return {0, 0}
end

current = redis.call("INCR", key)
return {1, limit - current}
"""


class RedisRateLimitStore:
    """
    Same fixed-window contract, shared across processes.

    Uses Redis Lua for atomicity; key expiry ends the window, so there is
    nothing for sweep() to do.
    """

    def __init__(self, r: Redis, prefix: str = "rl:") -> None:
        self._r = r
        self._prefix = prefix

    def check(self, key: str, limit: int, window_ms: int) -> RateLimitResult:
        _check_args(limit, window_ms)
        allowed, remaining = self._r.eval(
            FIXED_WINDOW_LUA,
            1,
            self._prefix + key,
            limit,
            window_ms,
        )
        # redis-py may return ints or strings depending on decode_responses
        return RateLimitResult(allowed=bool(int(allowed)), remaining=max(0, int(remaining)))

    def sweep(self) -> int:
        return 0


def build_rate_limit_store(cfg: Settings) -> RateLimitStore:
    if cfg.rate_limit_backend == "redis":
        from linkhub.core.redis import get_redis_client

        return RedisRateLimitStore(get_redis_client())
    if cfg.rate_limit_backend == "memory":
        return InMemoryRateLimitStore()
    raise ValueError(f"Unknown rate limit backend: {cfg.rate_limit_backend!r}")
