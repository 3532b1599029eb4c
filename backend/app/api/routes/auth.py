"""Account endpoints - POST /api/register, /api/login, /api/logout, GET /api/user."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from backend.app.access.accounts import authenticate, log_in, log_out, register_user
from backend.app.api.auth import ensure_visitor_session, get_current_user_id, get_visitor_session
from backend.app.db.context import VisitorSession
from backend.app.db.engine import get_record_store
from backend.app.db.repositories import RecordStore, SessionStore
from backend.app.errors import NotFoundError
from backend.app.middleware.ratelimit import enforce_rate_limit
from backend.app.models.users import CredentialsRequest, UserResponse
from backend.app.sessions import get_session_store

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    request: CredentialsRequest,
    store: Annotated[RecordStore, Depends(get_record_store)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
    visitor: Annotated[VisitorSession, Depends(ensure_visitor_session)],
) -> UserResponse:
    """Create an account and log the caller in as it."""
    user = register_user(store, request.email, request.pin)
    log_in(sessions, visitor, user)
    return UserResponse.from_record(user)


@router.post(
    "/login",
    response_model=UserResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
def login(
    request: CredentialsRequest,
    store: Annotated[RecordStore, Depends(get_record_store)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
    visitor: Annotated[VisitorSession, Depends(ensure_visitor_session)],
) -> UserResponse:
    """Log the caller in with email and PIN."""
    user = authenticate(store, request.email, request.pin)
    log_in(sessions, visitor, user)
    return UserResponse.from_record(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    sessions: Annotated[SessionStore, Depends(get_session_store)],
    visitor: Annotated[VisitorSession | None, Depends(get_visitor_session)],
) -> Response:
    """Clear the caller's owner identity."""
    if visitor is not None:
        log_out(sessions, visitor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/user", response_model=UserResponse)
def current_user(
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> UserResponse:
    """Return the logged-in user."""
    user = store.users.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return UserResponse.from_record(user)
