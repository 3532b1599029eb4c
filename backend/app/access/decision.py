"""Access decision function - the single read gate for documents.

Two paths grant read access: the session is logged in as the document's
owner, or the session holds an unexpired PIN elevation for that owner.
Approved access requests are not consulted.
"""

from datetime import datetime

from backend.app.db.context import VisitorSession
from backend.app.db.repositories import DocumentRecord
from backend.app.errors import ForbiddenError
from backend.app.utils.logging import audit_logger
from backend.app.utils.metrics import document_reads_total


def can_read(
    session: VisitorSession | None,
    document: DocumentRecord | None,
    now: datetime | None = None,
) -> bool:
    """Return True if ``session`` may read ``document``. Pure."""
    if session is None or document is None:
        return False

    if session.authenticated_user_id is not None and (
        session.authenticated_user_id == document.owner_id
    ):
        return True

    return session.is_verified_for(document.owner_id, now)


def authorize_read(
    session: VisitorSession | None,
    document: DocumentRecord | None,
    document_id: int,
    action: str,
) -> DocumentRecord:
    """Gate a view or download.

    Missing and denied documents fail identically so callers cannot test
    which document ids exist.

    Raises:
        ForbiddenError: If the read is not allowed
    """
    allowed = can_read(session, document)

    audit_logger.log_read_decision(
        document_id=document_id,
        action=action,
        allowed=allowed,
        authenticated_user_id=session.authenticated_user_id if session else None,
        verified_owner_id=session.verified_owner_id if session else None,
    )
    document_reads_total.labels(action=action, outcome="allowed" if allowed else "denied").inc()

    if not allowed or document is None:
        raise ForbiddenError("Access denied")

    return document
