"""In-memory, per-client request ceilings and the middleware that enforces them."""

import logging
import math
import threading
import time
from collections import defaultdict
from collections.abc import Callable, Iterable

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Sliding-window counter keyed by client.

    A key is limited once it has max_requests hits within the last window_seconds.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, list[float]] = defaultdict(list)
        self._lock = threading.Lock()

    def _prune(self, key: str, now: float) -> list[float]:
        hits = [t for t in self._hits.get(key, ()) if now - t < self.window_seconds]
        if hits:
            self._hits[key] = hits
        else:
            self._hits.pop(key, None)
        return hits

    def is_limited(self, key: str) -> bool:
        with self._lock:
            return len(self._prune(key, self._clock())) >= self.max_requests

    def acquire(self, key: str) -> bool:
        """Record a hit unless the key is already at its ceiling. Check and record are one step."""
        with self._lock:
            now = self._clock()
            if len(self._prune(key, now)) >= self.max_requests:
                return False
            self._hits[key].append(now)
            return True

    def release(self, key: str) -> None:
        """Give back the most recent hit for key (a request that should not count)."""
        with self._lock:
            hits = self._hits.get(key)
            if hits:
                hits.pop()
                if not hits:
                    del self._hits[key]

    def retry_after(self, key: str) -> int:
        """Seconds until the oldest hit for key leaves the window (0 if not limited)."""
        with self._lock:
            now = self._clock()
            hits = self._prune(key, now)
            if len(hits) < self.max_requests:
                return 0
            return max(1, math.ceil(hits[0] + self.window_seconds - now))

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)


def client_key(request: Request, trust_proxy: bool = False) -> str:
    """Client address used to key rate limits."""
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client is None:
        return "unknown"
    return request.client.host


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Reject requests with 429 once the client exceeds the limiter's ceiling.

    Applies to paths equal to one of `paths` or starting with one of `prefixes`.
    Every request takes a slot before it is processed, so parallel requests cannot
    overshoot the ceiling. With skip_successful=True the slot is given back when
    the response status is below 400, so successful logins never use it up.
    """

    def __init__(
        self,
        app: ASGIApp,
        limiter: RateLimiter,
        message: str,
        paths: Iterable[str] = (),
        prefixes: Iterable[str] = (),
        skip_successful: bool = False,
        trust_proxy: bool = False,
    ) -> None:
        super().__init__(app)
        self.limiter = limiter
        self.message = message
        self.paths = frozenset(paths)
        self.prefixes = tuple(prefixes)
        self.skip_successful = skip_successful
        self.trust_proxy = trust_proxy

    def applies_to(self, path: str) -> bool:
        return path in self.paths or (bool(self.prefixes) and path.startswith(self.prefixes))

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self.applies_to(request.url.path):
            return await call_next(request)

        key = client_key(request, self.trust_proxy)
        if not self.limiter.acquire(key):
            logger.warning(
                "Rate limit exceeded: client=%s path=%s limit=%s/%ss",
                key,
                request.url.path,
                self.limiter.max_requests,
                self.limiter.window_seconds,
            )
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"message": self.message},
                headers={"Retry-After": str(self.limiter.retry_after(key))},
            )

        response = await call_next(request)
        if self.skip_successful and response.status_code < 400:
            self.limiter.release(key)
        return response
