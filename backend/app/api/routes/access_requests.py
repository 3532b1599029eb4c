"""Access request endpoints - create, list, decide."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, status

from backend.app.access.lifecycle import (
    create_request,
    list_requests_for_owner,
    transition_request,
)
from backend.app.api.auth import get_current_user_id
from backend.app.db.engine import get_record_store
from backend.app.db.repositories import RecordStore
from backend.app.models.access import (
    AccessRequestResponse,
    CreateAccessRequest,
    UpdateAccessRequestStatus,
)

router = APIRouter(prefix="/api/access-requests", tags=["access-requests"])


@router.post("", response_model=AccessRequestResponse, status_code=status.HTTP_201_CREATED)
def create_access_request(
    request: CreateAccessRequest,
    store: Annotated[RecordStore, Depends(get_record_store)],
    user_agent: Annotated[str | None, Header()] = None,
) -> AccessRequestResponse:
    """Submit a request to view a target owner's documents.

    No authentication: the requester is not yet authorized. Device info is
    taken from the User-Agent header and the timestamp from the server clock.
    """
    record = create_request(
        store,
        request.user_id,
        request.requested_documents,
        device_info=user_agent,
        location=request.location,
    )
    return AccessRequestResponse.from_record(record)


@router.get("", response_model=list[AccessRequestResponse])
def list_access_requests(
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> list[AccessRequestResponse]:
    """List every request targeting the caller, in creation order."""
    return [
        AccessRequestResponse.from_record(record)
        for record in list_requests_for_owner(store, user_id)
    ]


@router.patch("/{request_id}", response_model=AccessRequestResponse)
def update_access_request(
    request_id: int,
    request: UpdateAccessRequestStatus,
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> AccessRequestResponse:
    """Approve or deny a pending request targeting the caller."""
    record = transition_request(store, request_id, request.status, user_id)
    return AccessRequestResponse.from_record(record)
