"""Rate limiting middleware for API protection."""

import logging
import math
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from fittrack.core.request_utils import get_client_ip

logger = logging.getLogger(__name__)

DEFAULT_MAX_KEYS = 10000


@dataclass
class RateLimitCounter:
    """Request count for one key in the current fixed window."""

    count: int
    reset_time: float


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    retry_after: int = 0


@dataclass(frozen=True)
class RateLimitPolicy:
    """A named limit applied to a set of paths.

    ``paths`` match exactly or on a segment boundary ("/api" matches
    "/api/x" but not "/apix").
    """

    name: str
    paths: tuple[str, ...]
    window_seconds: int
    max_requests: int
    key_prefix: str = ""
    message: str = "Too many requests, please try again later."

    def applies_to(self, path: str) -> bool:
        return any(path == p or path.startswith(p.rstrip("/") + "/") for p in self.paths)

    def key_for(self, client_ip: str) -> str:
        return f"{self.key_prefix}{client_ip}"


class RateLimiter:
    """In-memory fixed-window rate limiter.

    Counters live in an LRU-ordered map capped at ``max_keys`` so a flood of
    distinct client keys cannot grow memory without bound. Evicting a key
    forgets its count, which at worst lets that client start a fresh window.

    Designed for single-process deployments: with N workers the effective
    limit is N times the configured maximum.
    """

    def __init__(
        self,
        max_keys: int = DEFAULT_MAX_KEYS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.max_keys = max_keys
        self._clock = clock
        self._counters: OrderedDict[str, RateLimitCounter] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._counters)

    def check_and_increment(
        self, key: str, window_seconds: float, max_requests: int
    ) -> RateLimitDecision:
        """Count a request against ``key`` and decide whether to admit it.

        The read-modify-write happens under the lock, so concurrent requests
        for one key never admit more than ``max_requests`` per window.
        """
        with self._lock:
            now = self._clock()
            counter = self._counters.get(key)

            if counter is None or now > counter.reset_time:
                self._counters[key] = RateLimitCounter(count=1, reset_time=now + window_seconds)
                self._counters.move_to_end(key)
                self._evict_overflow()
                return RateLimitDecision(
                    allowed=True, limit=max_requests, remaining=max(0, max_requests - 1)
                )

            counter.count += 1
            self._counters.move_to_end(key)

            if counter.count <= max_requests:
                return RateLimitDecision(
                    allowed=True, limit=max_requests, remaining=max_requests - counter.count
                )

            retry_after = max(1, math.ceil(counter.reset_time - now))
            return RateLimitDecision(
                allowed=False, limit=max_requests, remaining=0, retry_after=retry_after
            )

    def _evict_overflow(self) -> None:
        while len(self._counters) > self.max_keys:
            key, _ = self._counters.popitem(last=False)
            logger.debug(f"Rate limiter evicted least recently used key {key}")

    def get_counter(self, key: str) -> RateLimitCounter | None:
        with self._lock:
            counter = self._counters.get(key)
            if counter is None:
                return None
            return RateLimitCounter(count=counter.count, reset_time=counter.reset_time)

    def get_stats(self) -> dict[str, dict]:
        """Get current rate limit statistics."""
        with self._lock:
            return {
                key: {"count": counter.count, "reset_time": counter.reset_time}
                for key, counter in self._counters.items()
            }

    def reset(self, key: str | None = None) -> None:
        """Reset one key, or every counter when no key is given."""
        with self._lock:
            if key is not None:
                self._counters.pop(key, None)
            else:
                self._counters.clear()

    def cleanup_expired(self) -> int:
        """Drop counters whose window has already ended.

        Returns:
            Number of counters removed
        """
        with self._lock:
            now = self._clock()
            stale = [key for key, counter in self._counters.items() if now > counter.reset_time]
            for key in stale:
                del self._counters[key]

        if stale:
            logger.info(f"Cleaned up {len(stale)} stale rate limit counters")
        return len(stale)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply fixed-window policies in order; the first rejection wins.

    Every policy whose paths match the request is counted, so a login
    attempt consumes both the auth allowance and the general allowance.
    Headers on admitted responses describe the last (broadest) policy.
    """

    def __init__(
        self,
        app: ASGIApp,
        rate_limiter: RateLimiter,
        policies: Sequence[RateLimitPolicy],
        trusted_proxies: set[str] | None = None,
        enabled: bool = True,
    ) -> None:
        super().__init__(app)
        self.rate_limiter = rate_limiter
        self.policies = list(policies)
        self.trusted_proxies = trusted_proxies or set()
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self.enabled:
            return await call_next(request)

        path = request.url.path
        matching = [p for p in self.policies if p.applies_to(path)]
        if not matching:
            return await call_next(request)

        client_ip = get_client_ip(request, self.trusted_proxies)
        decisions: list[RateLimitDecision] = []

        for policy in matching:
            decision = self.rate_limiter.check_and_increment(
                policy.key_for(client_ip), policy.window_seconds, policy.max_requests
            )
            if not decision.allowed:
                logger.warning(
                    "Rate limit exceeded",
                    extra={
                        "client_ip": client_ip,
                        "method": request.method,
                        "path": path,
                        "reason": policy.name,
                        "retry_after": decision.retry_after,
                    },
                )
                return JSONResponse(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    content={"message": policy.message, "retryAfter": decision.retry_after},
                    headers={
                        "Retry-After": str(decision.retry_after),
                        "X-RateLimit-Limit": str(decision.limit),
                        "X-RateLimit-Remaining": "0",
                    },
                )
            decisions.append(decision)

        response = await call_next(request)

        last = decisions[-1]
        response.headers["X-RateLimit-Limit"] = str(last.limit)
        response.headers["X-RateLimit-Remaining"] = str(last.remaining)
        return response


def build_policies(
    window_seconds: int,
    max_requests: int,
    auth_max_requests: int,
    auth_paths: Sequence[str] = ("/api/auth/login", "/api/auth/register"),
    api_prefix: str = "/api",
) -> list[RateLimitPolicy]:
    """Auth policy first so credential stuffing hits the stricter limit."""
    return [
        RateLimitPolicy(
            name="auth",
            paths=tuple(auth_paths),
            window_seconds=window_seconds,
            max_requests=auth_max_requests,
            key_prefix="auth_",
            message="Too many login attempts, please try again later.",
        ),
        RateLimitPolicy(
            name="api",
            paths=(api_prefix,),
            window_seconds=window_seconds,
            max_requests=max_requests,
        ),
    ]
