"""Rate limiting for credential-checking endpoints."""

import logging
from datetime import datetime
from typing import Annotated

import redis
from fastapi import Depends, Request

from backend.app.config import Settings, get_settings
from backend.app.db.inmemory import InMemoryRateLimiter
from backend.app.db.repositories import RateLimiter
from backend.app.errors import RateLimitedError
from backend.app.ratelimit import RedisRateLimiter, make_rate_limit_key

logger = logging.getLogger(__name__)


class RateLimitMiddleware:
    """Maps request paths to buckets and enforces each bucket's limiter."""

    def __init__(self, limiters: dict[str, RateLimiter], bucket_map: dict[str, str]) -> None:
        """Initialize rate limit middleware.

        Args:
            limiters: Limiter per bucket name
            bucket_map: Mapping from path patterns to bucket names
        """
        self._limiters = limiters
        self._bucket_map = bucket_map

    def check_rate_limit(
        self, path: str, subject: str, now: datetime | None = None
    ) -> tuple[bool, int]:
        """Check if request is allowed under rate limit.

        Args:
            path: Request path
            subject: Caller identity
            now: Current time (for testing)

        Returns:
            Tuple of (allowed, retry_after_seconds)
        """
        if now is None:
            now = datetime.now()

        bucket = self._get_bucket(path)

        if bucket is None or bucket not in self._limiters:
            return (True, 0)

        key = make_rate_limit_key(subject, bucket)
        retry_after = self._limiters[bucket].check_quota(key, now)

        if retry_after is None:
            return (True, 0)

        return (False, retry_after.seconds)

    def _get_bucket(self, path: str) -> str | None:
        for pattern, bucket in self._bucket_map.items():
            if pattern in path:
                return bucket

        return None


def create_default_bucket_map() -> dict[str, str]:
    """Create default bucket mapping.

    Returns:
        Dictionary mapping path patterns to bucket names
    """
    return {
        "/verify-pin": "pin",
        "/login": "login",
    }


def build_rate_limit_middleware(settings: Settings) -> RateLimitMiddleware:
    """Build limiters for each bucket, shared through Redis when configured."""
    quotas = {
        "pin": settings.pin_attempts_per_min,
        "login": settings.login_attempts_per_min,
    }

    limiters: dict[str, RateLimiter]
    if settings.redis_url:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        limiters = {bucket: RedisRateLimiter(client, quota) for bucket, quota in quotas.items()}
    else:
        limiters = {bucket: InMemoryRateLimiter(quota) for bucket, quota in quotas.items()}

    return RateLimitMiddleware(limiters, create_default_bucket_map())


# Global rate limit middleware
_rate_limit_middleware: RateLimitMiddleware | None = None


def get_rate_limit_middleware() -> RateLimitMiddleware:
    """FastAPI dependency returning the process-wide rate limit middleware."""
    global _rate_limit_middleware
    if _rate_limit_middleware is None:
        _rate_limit_middleware = build_rate_limit_middleware(get_settings())
    return _rate_limit_middleware


def enforce_rate_limit(
    request: Request,
    middleware: Annotated[RateLimitMiddleware, Depends(get_rate_limit_middleware)],
) -> None:
    """Route dependency rejecting callers that exhausted their bucket.

    Raises:
        RateLimitedError: If the caller is over quota
    """
    subject = request.client.host if request.client else "unknown"
    allowed, retry_after = middleware.check_rate_limit(request.url.path, subject)

    if not allowed:
        logger.warning("Rate limit exceeded for %s on %s", subject, request.url.path)
        raise RateLimitedError(retry_after)
