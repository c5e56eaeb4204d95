"""
In-memory rate limiting for mutating registry endpoints.

Sliding window of request timestamps per (client IP, route) key. State is
per process; a multi-worker deployment needs a shared store instead.
"""
import time
import logging
from collections import defaultdict, deque
from typing import Deque, Dict

from fastapi import Request

from domain.errors import RateLimitError

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window counter keyed by an arbitrary string."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)

    def _evict(self, key: str, window_seconds: int) -> Deque[float]:
        cutoff = self._clock() - window_seconds
        stamps = self._requests[key]
        while stamps and stamps[0] <= cutoff:
            stamps.popleft()
        return stamps

    def check(self, key: str, max_requests: int, window_seconds: int) -> bool:
        """Record a request and return True, or return False if over the limit."""
        stamps = self._evict(key, window_seconds)
        if len(stamps) >= max_requests:
            return False
        stamps.append(self._clock())
        return True

    def remaining(self, key: str, max_requests: int, window_seconds: int) -> int:
        return max(0, max_requests - len(self._evict(key, window_seconds)))

    def reset(self) -> None:
        self._requests.clear()


# Global rate limiter instance
limiter = RateLimiter()


def rate_limit(max_requests: int = 10, window_seconds: int = 60):
    """
    FastAPI dependency factory.

    Usage:
        @router.post("/mint")
        async def mint(..., _rate=Depends(rate_limit(settings.mint_rate_limit))):
            ...
    """
    async def _check_rate_limit(request: Request):
        client_ip = request.client.host if request.client else "unknown"
        key = f"{client_ip}:{request.url.path}"

        if not limiter.check(key, max_requests, window_seconds):
            logger.warning(
                f"Rate limit exceeded: {client_ip} on {request.url.path} "
                f"({max_requests}/{window_seconds}s)"
            )
            raise RateLimitError(
                f"Maximum {max_requests} requests per {window_seconds} seconds. Try again later.",
                details={"retry_after_seconds": window_seconds, "limit": max_requests},
            )

    return _check_rate_limit
