"""Access request lifecycle.

States::

    pending --> approved
           \\-> denied

``approved`` and ``denied`` are terminal. Approval is bookkeeping only: it
does not change what ``can_read`` allows.
"""

from datetime import datetime

from backend.app.db.context import utcnow
from backend.app.db.repositories import (
    ALL_DOCUMENTS,
    AccessRequestRecord,
    AccessRequestStatus,
    RecordStore,
    RequestedDocuments,
    RequesterInfo,
)
from backend.app.errors import (
    ForbiddenError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
)
from backend.app.utils.logging import audit_logger
from backend.app.utils.metrics import (
    access_request_transitions_total,
    access_requests_created_total,
)

UNKNOWN_DEVICE = "Unknown device"

ALLOWED_TRANSITIONS: dict[AccessRequestStatus, frozenset[AccessRequestStatus]] = {
    AccessRequestStatus.pending: frozenset(
        {AccessRequestStatus.approved, AccessRequestStatus.denied}
    ),
    AccessRequestStatus.approved: frozenset(),
    AccessRequestStatus.denied: frozenset(),
}


def normalize_requested_documents(value: list[int] | str) -> RequestedDocuments:
    """Validate the requested document set.

    Accepts the ``"all"`` sentinel or a non-empty list of positive ids;
    duplicates are dropped, first occurrence order kept.

    Raises:
        InvalidInputError: If the value is empty or malformed
    """
    if isinstance(value, str):
        if value == ALL_DOCUMENTS:
            return ALL_DOCUMENTS
        raise InvalidInputError('requested_documents must be a list of ids or "all"')

    if not value:
        raise InvalidInputError("At least one document must be requested")

    if any(doc_id <= 0 for doc_id in value):
        raise InvalidInputError("Document ids must be positive")

    return list(dict.fromkeys(value))


def create_request(
    store: RecordStore,
    target_user_id: int,
    requested_documents: list[int] | str,
    *,
    device_info: str | None,
    location: str | None = None,
    now: datetime | None = None,
) -> AccessRequestRecord:
    """Record a third party's request to view a target owner's documents.

    The requester is unauthenticated by definition. ``device_info`` comes from
    the client's declared identity and ``location`` is advisory only.

    Raises:
        InvalidInputError: If the requested set is empty or malformed
        NotFoundError: If the target user does not exist
    """
    documents = normalize_requested_documents(requested_documents)

    if store.users.get_user(target_user_id) is None:
        raise NotFoundError("User not found")

    info = RequesterInfo(
        device_info=device_info or UNKNOWN_DEVICE,
        location=location,
        timestamp=now or utcnow(),
    )
    record = store.access_requests.create_request(target_user_id, documents, info)
    access_requests_created_total.inc()
    return record


def list_requests_for_owner(
    store: RecordStore, owner_user_id: int | None
) -> list[AccessRequestRecord]:
    """All requests targeting the owner, every status, in creation order.

    Raises:
        UnauthorizedError: If no owner is logged in
    """
    if owner_user_id is None:
        raise UnauthorizedError("Not authenticated")

    return store.access_requests.list_requests(owner_user_id)


def parse_decision(value: str) -> AccessRequestStatus:
    """Parse a requested decision; only terminal states can be requested.

    Raises:
        InvalidInputError: If ``value`` is not ``approved`` or ``denied``
    """
    try:
        status = AccessRequestStatus(value)
    except ValueError as e:
        raise InvalidInputError("Status must be approved or denied") from e

    if status == AccessRequestStatus.pending:
        raise InvalidInputError("Status must be approved or denied")

    return status


def transition_request(
    store: RecordStore,
    request_id: int,
    new_status: str,
    actor_user_id: int | None,
) -> AccessRequestRecord:
    """Move a request to ``approved`` or ``denied`` on behalf of its target owner.

    Raises:
        UnauthorizedError: If no owner is logged in
        InvalidInputError: If ``new_status`` is not a decision
        NotFoundError: If the request does not exist
        ForbiddenError: If the actor is not the request's target user
        InvalidTransitionError: If the request is already decided
    """
    if actor_user_id is None:
        raise UnauthorizedError("Not authenticated")

    status = parse_decision(new_status)

    current = store.access_requests.get_request(request_id)
    if current is None:
        raise NotFoundError("Access request not found")

    if current.target_user_id != actor_user_id:
        audit_logger.log_request_transition(request_id, actor_user_id, status.value, False)
        raise ForbiddenError("Only the target user can decide this request")

    if status not in ALLOWED_TRANSITIONS[current.status]:
        audit_logger.log_request_transition(request_id, actor_user_id, status.value, False)
        raise InvalidTransitionError(f"Access request is already {current.status.value}")

    updated = store.access_requests.update_status(request_id, status, expected=current.status)
    if updated is None:
        raise NotFoundError("Access request not found")

    access_request_transitions_total.labels(status=status.value).inc()
    audit_logger.log_request_transition(request_id, actor_user_id, status.value, True)
    return updated
