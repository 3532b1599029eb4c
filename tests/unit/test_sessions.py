"""Unit tests for visitor session state and session stores."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest
import redis

from backend.app.config import Settings
from backend.app.db.context import VisitorSession
from backend.app.db.inmemory import InMemorySessionStore
from backend.app.errors import StoreUnavailableError
from backend.app.sessions import RedisSessionStore, build_session_store, make_session_key

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_visitor_session_dict_roundtrip() -> None:
    """Test session state survives serialization for Redis."""
    session = VisitorSession(
        token="abc",
        authenticated_user_id=3,
        verified_owner_id=7,
        verified_until=NOW + timedelta(hours=1),
        created_at=NOW,
    )

    restored = VisitorSession.from_dict(json.loads(json.dumps(session.to_dict())))

    assert restored == session


def test_visitor_session_is_verified_for_exact_owner_only() -> None:
    """Test an elevation covers only its own target."""
    session = VisitorSession(token="abc", verified_owner_id=7)

    assert session.is_verified_for(7, NOW) is True
    assert session.is_verified_for(8, NOW) is False
    assert VisitorSession(token="x").is_verified_for(7, NOW) is False


def test_inmemory_session_store_roundtrip() -> None:
    """Test create/get/save/delete on the in-memory store."""
    store = InMemorySessionStore()
    session = store.create()

    loaded = store.get(session.token)
    assert loaded is not None
    assert loaded.authenticated_user_id is None

    loaded.authenticated_user_id = 4
    store.save(loaded)
    reloaded = store.get(session.token)
    assert reloaded is not None
    assert reloaded.authenticated_user_id == 4

    store.delete(session.token)
    assert store.get(session.token) is None


def test_inmemory_session_store_returns_copies() -> None:
    """Test mutating a loaded session does not change the store until saved."""
    store = InMemorySessionStore()
    session = store.create()

    loaded = store.get(session.token)
    assert loaded is not None
    loaded.verified_owner_id = 9

    fresh = store.get(session.token)
    assert fresh is not None
    assert fresh.verified_owner_id is None


def test_inmemory_session_store_expires() -> None:
    """Test sessions past their idle lifetime are gone."""
    store = InMemorySessionStore(ttl_seconds=0)
    session = store.create()

    assert store.get(session.token) is None


def test_inmemory_session_store_sweeps_expired_sessions() -> None:
    """Test expired sessions are dropped even if their token is never looked up again."""
    clock = MagicMock(return_value=NOW)
    with patch("backend.app.db.inmemory.utcnow", clock):
        store = InMemorySessionStore(ttl_seconds=60)
        for _ in range(1000):
            store.create()
        assert len(store) == 1000

        clock.return_value = NOW + timedelta(hours=2)
        fresh = [store.create() for _ in range(10)]

        assert len(store) == 10
        assert all(store.get(session.token) is not None for session in fresh)


def test_inmemory_session_store_sweep_keeps_live_sessions() -> None:
    """Test the sweep removes only sessions past their idle lifetime."""
    clock = MagicMock(return_value=NOW)
    with patch("backend.app.db.inmemory.utcnow", clock):
        store = InMemorySessionStore(ttl_seconds=3600, sweep_interval_seconds=60)
        old = store.create()

        clock.return_value = NOW + timedelta(minutes=30)
        recent = store.create()

        clock.return_value = NOW + timedelta(minutes=80)
        store.create()

        assert len(store) == 2
        assert store.get(old.token) is None
        assert store.get(recent.token) is not None


def test_inmemory_session_store_tokens_unique() -> None:
    """Test every session gets its own unguessable token."""
    store = InMemorySessionStore()
    tokens = {store.create().token for _ in range(50)}

    assert len(tokens) == 50
    assert all(len(token) >= 32 for token in tokens)


def test_make_session_key() -> None:
    """Test Redis key format."""
    assert make_session_key("abc") == "session:abc"


def test_redis_session_store_save_uses_setex() -> None:
    """Test saving writes JSON with the configured TTL."""
    client = MagicMock()
    store = RedisSessionStore(client, ttl_seconds=600)
    session = VisitorSession(token="abc", authenticated_user_id=1, created_at=NOW)

    store.save(session)

    key, ttl, payload = client.setex.call_args.args
    assert key == "session:abc"
    assert ttl == 600
    assert json.loads(payload)["authenticated_user_id"] == 1


def test_redis_session_store_get() -> None:
    """Test loading an existing and a missing session."""
    client = MagicMock()
    session = VisitorSession(token="abc", verified_owner_id=7, created_at=NOW)
    client.get.side_effect = lambda key: (
        json.dumps(session.to_dict()) if key == "session:abc" else None
    )
    store = RedisSessionStore(client)

    assert store.get("abc") == session
    assert store.get("missing") is None


def test_redis_session_store_unavailable() -> None:
    """Test Redis failures surface as StoreUnavailableError."""
    client = MagicMock()
    client.get.side_effect = redis.ConnectionError("down")
    client.setex.side_effect = redis.ConnectionError("down")
    store = RedisSessionStore(client)

    with pytest.raises(StoreUnavailableError):
        store.get("abc")
    with pytest.raises(StoreUnavailableError):
        store.save(VisitorSession(token="abc"))


def test_build_session_store_defaults_to_memory() -> None:
    """Test no REDIS_URL selects the in-memory store."""
    store = build_session_store(Settings(_env_file=None, redis_url=None))

    assert isinstance(store, InMemorySessionStore)
