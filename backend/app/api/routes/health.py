"""Health check endpoints.

- /health: liveness, always 200
- /healthz: checks the SQL database and Redis when they are configured
"""

import json
from typing import Any

import redis
from fastapi import APIRouter, Response
from sqlalchemy import text
from starlette.concurrency import run_in_threadpool

from backend.app.config import Settings, get_settings
from backend.app.db.engine import create_engine_from_settings

router = APIRouter()


def _ping_db(settings: Settings) -> None:
    engine = create_engine_from_settings(settings)
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    finally:
        engine.dispose()


def _ping_redis(settings: Settings) -> None:
    client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
    try:
        client.ping()
    finally:
        client.close()


async def check_db(settings: Settings) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    if not settings.database_url:
        return (True, "in_memory")

    try:
        await run_in_threadpool(_ping_db, settings)
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


async def check_redis(settings: Settings) -> tuple[bool, str]:
    """Check Redis connectivity.

    Returns:
        (is_ok, status_message)
    """
    if not settings.redis_url:
        return (True, "not_configured")

    try:
        await run_in_threadpool(_ping_redis, settings)
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | Response:
    """Health check endpoint.

    Returns:
        200 with component status if the record and session stores are reachable
        503 otherwise
    """
    settings = get_settings()

    db_ok, db_status = await check_db(settings)
    redis_ok, redis_status = await check_redis(settings)

    core_ok = db_ok and redis_ok

    response_body = {
        "status": "ok" if core_ok else "degraded",
        "components": {
            "db": db_status,
            "redis": redis_status,
        },
    }

    if not core_ok:
        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
