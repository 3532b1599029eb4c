"""FastAPI application - document sharing service."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.app.api.routes.access_requests import router as access_requests_router
from backend.app.api.routes.auth import router as auth_router
from backend.app.api.routes.documents import router as documents_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.api.routes.pins import router as pins_router
from backend.app.config import get_settings
from backend.app.errors import DocShareError, RateLimitedError, StoreUnavailableError
from backend.app.utils.logging import configure_logging

configure_logging(get_settings().log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="DocShare API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(auth_router)
app.include_router(pins_router)
app.include_router(documents_router)
app.include_router(access_requests_router)


@app.exception_handler(DocShareError)
async def handle_domain_error(request: Request, exc: DocShareError) -> JSONResponse:
    """Translate domain errors into JSON responses with their status code."""
    headers: dict[str, str] = {}
    if isinstance(exc, RateLimitedError):
        headers["Retry-After"] = str(exc.retry_after)
    elif isinstance(exc, StoreUnavailableError):
        headers["Retry-After"] = "1"
        logger.error("Store unavailable during %s %s", request.method, request.url.path)

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers or None,
    )


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "DocShare API", "version": "0.1.0"}
