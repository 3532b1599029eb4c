"""PIN verification endpoint - POST /api/verify-pin/{target_user_id}."""

from typing import Annotated

from fastapi import APIRouter, Depends

from backend.app.access.verification import verify_pin
from backend.app.api.auth import ensure_visitor_session
from backend.app.config import Settings, get_settings
from backend.app.db.context import VisitorSession
from backend.app.db.engine import get_record_store
from backend.app.db.repositories import RecordStore, SessionStore
from backend.app.errors import NotFoundError
from backend.app.middleware.ratelimit import enforce_rate_limit
from backend.app.models.access import PinVerifyRequest, PinVerifyResponse
from backend.app.sessions import get_session_store

router = APIRouter(prefix="/api", tags=["pins"])


@router.post(
    "/verify-pin/{target_user_id}",
    response_model=PinVerifyResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
def verify_pin_endpoint(
    target_user_id: int,
    request: PinVerifyRequest,
    store: Annotated[RecordStore, Depends(get_record_store)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
    visitor: Annotated[VisitorSession, Depends(ensure_visitor_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> PinVerifyResponse:
    """Check a PIN for a target user; on success elevate the caller's session.

    Unknown users answer exactly like a wrong PIN.
    """
    try:
        result = verify_pin(
            store,
            sessions,
            visitor,
            target_user_id,
            str(request.pin),
            elevation_ttl_seconds=settings.pin_elevation_ttl_seconds,
        )
    except NotFoundError:
        return PinVerifyResponse(valid=False)

    return PinVerifyResponse(valid=result.valid)
