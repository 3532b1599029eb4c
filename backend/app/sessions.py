"""Visitor session stores and the process-wide session store dependency."""

import json
import logging
import secrets

import redis

from backend.app.config import Settings, get_settings
from backend.app.db.context import VisitorSession
from backend.app.db.inmemory import InMemorySessionStore
from backend.app.db.repositories import SessionStore
from backend.app.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


def make_session_key(token: str) -> str:
    """Create the Redis key for a session token."""
    return f"session:{token}"


class RedisSessionStore:
    """Redis-based session store using SETEX with a sliding TTL."""

    def __init__(self, redis_client: redis.Redis, ttl_seconds: int = 24 * 3600) -> None:
        """Initialize session store.

        Args:
            redis_client: Redis client (decode_responses=True)
            ttl_seconds: Idle lifetime of a session
        """
        self._redis = redis_client
        self._ttl_seconds = ttl_seconds

    def create(self) -> VisitorSession:
        """Create and persist an empty session."""
        session = VisitorSession(token=secrets.token_urlsafe(32))
        self.save(session)
        return session

    def get(self, token: str) -> VisitorSession | None:
        """Get a live session. Expiry is delegated to Redis."""
        try:
            raw = self._redis.get(make_session_key(token))
        except redis.RedisError as e:
            raise StoreUnavailableError("Session store unavailable") from e

        if raw is None:
            return None

        return VisitorSession.from_dict(json.loads(raw))

    def save(self, session: VisitorSession) -> None:
        """Persist session state and refresh its TTL."""
        try:
            self._redis.setex(
                make_session_key(session.token),
                self._ttl_seconds,
                json.dumps(session.to_dict()),
            )
        except redis.RedisError as e:
            raise StoreUnavailableError("Session store unavailable") from e

    def delete(self, token: str) -> None:
        """Forget a session."""
        try:
            self._redis.delete(make_session_key(token))
        except redis.RedisError as e:
            raise StoreUnavailableError("Session store unavailable") from e


def build_session_store(settings: Settings) -> SessionStore:
    """Build the session store selected by settings."""
    if not settings.redis_url:
        logger.info("REDIS_URL not set, using in-memory session store")
        return InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)

    client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
    return RedisSessionStore(client, ttl_seconds=settings.session_ttl_seconds)


# Global session store
_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """FastAPI dependency returning the process-wide session store."""
    global _session_store
    if _session_store is None:
        _session_store = build_session_store(get_settings())
    return _session_store
