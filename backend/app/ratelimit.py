"""Rate limiting utilities."""

from datetime import datetime

import redis

from backend.app.db.repositories import RetryAfter
from backend.app.errors import StoreUnavailableError


def make_rate_limit_key(subject: str, bucket: str) -> str:
    """Create rate limit key from caller subject and bucket.

    Args:
        subject: Caller identity (client address)
        bucket: Bucket name (e.g., "pin", "login")

    Returns:
        Rate limit key
    """
    return f"{subject}:{bucket}"


class RedisRateLimiter:
    """Redis-based rate limiter using INCR + EXPIRE pattern."""

    def __init__(self, redis_client: redis.Redis, max_requests: int, window_seconds: int = 60) -> None:
        """Initialize rate limiter.

        Args:
            redis_client: Redis client
            max_requests: Maximum requests per window
            window_seconds: Window size in seconds (default 60)
        """
        self._redis = redis_client
        self._max_requests = max_requests
        self._window_seconds = window_seconds

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available.

        Uses Redis INCR + EXPIRE for atomic counting.

        Args:
            key: Rate limit key
            now: Current timestamp

        Returns:
            RetryAfter if over quota, None if allowed

        Raises:
            StoreUnavailableError: If Redis cannot be reached
        """
        window_start = int(now.timestamp() / self._window_seconds) * self._window_seconds
        redis_key = f"ratelimit:{key}:{window_start}"

        try:
            count = self._redis.incr(redis_key)

            # Set expiry on first request
            if count == 1:
                self._redis.expire(redis_key, self._window_seconds)

            if count > self._max_requests:
                ttl = self._redis.ttl(redis_key)
                return RetryAfter(seconds=max(1, ttl))
        except redis.RedisError as e:
            raise StoreUnavailableError("Rate limit store unavailable") from e

        return None
