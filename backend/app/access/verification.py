"""PIN verification protocol.

A correct PIN for a target user elevates the caller's session to "verified
owner" for that one target. A wrong PIN leaves the session untouched.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from backend.app.access.pins import check_pin, check_pin_without_user
from backend.app.db.context import VisitorSession, utcnow
from backend.app.db.repositories import RecordStore, SessionStore
from backend.app.errors import NotFoundError
from backend.app.utils.logging import audit_logger
from backend.app.utils.metrics import pin_verifications_total


@dataclass(frozen=True)
class PinVerification:
    """Result of a PIN check."""

    valid: bool


def verify_pin(
    store: RecordStore,
    sessions: SessionStore,
    visitor: VisitorSession,
    target_user_id: int,
    candidate_pin: str,
    *,
    elevation_ttl_seconds: int | None = None,
    now: datetime | None = None,
) -> PinVerification:
    """Check ``candidate_pin`` against the target's stored hash.

    On a match, ``visitor`` is elevated for ``target_user_id`` (replacing any
    earlier elevation) and saved. With ``elevation_ttl_seconds`` the elevation
    expires; otherwise it lasts as long as the session.

    Raises:
        NotFoundError: If the target user does not exist
        StoreUnavailableError: If the record or session store is down
    """
    user = store.users.get_user(target_user_id)
    if user is None:
        check_pin_without_user(candidate_pin)
        pin_verifications_total.labels(outcome="unknown_user").inc()
        audit_logger.log_pin_attempt(target_user_id, False, visitor.token)
        raise NotFoundError("User not found")

    valid = check_pin(candidate_pin, user.pin_hash)

    if valid:
        visitor.verified_owner_id = target_user_id
        if elevation_ttl_seconds is None:
            visitor.verified_until = None
        else:
            visitor.verified_until = (now or utcnow()) + timedelta(seconds=elevation_ttl_seconds)
        sessions.save(visitor)

    pin_verifications_total.labels(outcome="valid" if valid else "invalid").inc()
    audit_logger.log_pin_attempt(target_user_id, valid, visitor.token)

    return PinVerification(valid=valid)
