"""PIN verification and access request models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from backend.app.db.repositories import AccessRequestRecord, AccessRequestStatus


class PinVerifyRequest(BaseModel):
    """Request body for POST /api/verify-pin/{user_id}."""

    pin: str | int = Field(..., description="Candidate PIN")


class PinVerifyResponse(BaseModel):
    """Response for POST /api/verify-pin/{user_id}."""

    valid: bool


class CreateAccessRequest(BaseModel):
    """Request body for POST /api/access-requests."""

    user_id: int = Field(..., gt=0, description="Target owner")
    requested_documents: list[int] | Literal["all"] = Field(
        ..., description='Document ids, or "all"'
    )
    location: str | None = Field(None, max_length=200, description="Advisory only")


class RequesterInfoResponse(BaseModel):
    """Requester metadata stamped at creation."""

    device_info: str
    location: str | None
    timestamp: datetime


class AccessRequestResponse(BaseModel):
    """An access request as seen by its target owner."""

    id: int
    target_user_id: int
    requested_documents: list[int] | Literal["all"]
    requester_info: RequesterInfoResponse
    status: AccessRequestStatus

    @classmethod
    def from_record(cls, record: AccessRequestRecord) -> "AccessRequestResponse":
        info = record.requester_info
        return cls(
            id=record.id,
            target_user_id=record.target_user_id,
            requested_documents=record.requested_documents,
            requester_info=RequesterInfoResponse(
                device_info=info.device_info,
                location=info.location,
                timestamp=info.timestamp,
            ),
            status=record.status,
        )


class UpdateAccessRequestStatus(BaseModel):
    """Request body for PATCH /api/access-requests/{id}."""

    status: str = Field(..., description="approved or denied")
