"""Session dependencies.

The visitor's session token travels in a cookie. Every authorization check
receives the loaded ``VisitorSession`` explicitly through these dependencies;
nothing reads session state from globals.
"""

from typing import Annotated

from fastapi import Depends, Request, Response

from backend.app.config import Settings, get_settings
from backend.app.db.context import VisitorSession
from backend.app.db.repositories import SessionStore
from backend.app.errors import UnauthorizedError
from backend.app.sessions import get_session_store


def get_visitor_session(
    request: Request,
    sessions: Annotated[SessionStore, Depends(get_session_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VisitorSession | None:
    """Load the caller's session, or None if it has none or it expired."""
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    return sessions.get(token)


def ensure_visitor_session(
    response: Response,
    visitor: Annotated[VisitorSession | None, Depends(get_visitor_session)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VisitorSession:
    """Load the caller's session, starting a new one if needed.

    Used by endpoints that mutate session state (login, PIN verification).
    """
    if visitor is not None:
        return visitor

    visitor = sessions.create()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=visitor.token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return visitor


def get_current_user_id(
    visitor: Annotated[VisitorSession | None, Depends(get_visitor_session)],
) -> int:
    """Id of the owner the caller is logged in as.

    Raises:
        UnauthorizedError: If the caller is not logged in
    """
    if visitor is None or visitor.authenticated_user_id is None:
        raise UnauthorizedError("Not authenticated")
    return visitor.authenticated_user_id
