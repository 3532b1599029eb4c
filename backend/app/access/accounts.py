"""Account registration, credential checks and login state."""

import logging

from backend.app.access.pins import check_pin, check_pin_without_user, hash_pin, validate_pin
from backend.app.db.context import VisitorSession
from backend.app.db.repositories import RecordStore, SessionStore, UserRecord
from backend.app.errors import UnauthorizedError

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def register_user(store: RecordStore, email: str, pin: str) -> UserRecord:
    """Create an account with a hashed PIN.

    Raises:
        InvalidInputError: If the PIN is malformed
        ConflictError: If the email is already registered
    """
    validate_pin(pin)
    user = store.users.create_user(normalize_email(email), hash_pin(pin))
    logger.info("Registered user %s", user.id)
    return user


def authenticate(store: RecordStore, email: str, pin: str) -> UserRecord:
    """Return the user whose credentials match.

    Unknown email and wrong PIN fail the same way.

    Raises:
        UnauthorizedError: If the credentials do not match
    """
    user = store.users.get_user_by_email(normalize_email(email))
    if user is None:
        check_pin_without_user(pin)
        raise UnauthorizedError("Invalid credentials")
    if not check_pin(pin, user.pin_hash):
        raise UnauthorizedError("Invalid credentials")
    return user


def log_in(sessions: SessionStore, visitor: VisitorSession, user: UserRecord) -> None:
    visitor.authenticated_user_id = user.id
    sessions.save(visitor)


def log_out(sessions: SessionStore, visitor: VisitorSession) -> None:
    """Clear the owner identity. A PIN elevation on the session survives."""
    visitor.authenticated_user_id = None
    sessions.save(visitor)
