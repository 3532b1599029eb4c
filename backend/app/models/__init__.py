"""Models package - re-exports for convenience."""

from backend.app.models.access import (
    AccessRequestResponse,
    CreateAccessRequest,
    PinVerifyRequest,
    PinVerifyResponse,
    RequesterInfoResponse,
    UpdateAccessRequestStatus,
)
from backend.app.models.documents import (
    DocumentResponse,
    DocumentSummary,
    RenameDocumentRequest,
)
from backend.app.models.users import CredentialsRequest, UserResponse

__all__ = [
    "AccessRequestResponse",
    "CreateAccessRequest",
    "CredentialsRequest",
    "DocumentResponse",
    "DocumentSummary",
    "PinVerifyRequest",
    "PinVerifyResponse",
    "RenameDocumentRequest",
    "RequesterInfoResponse",
    "UpdateAccessRequestStatus",
    "UserResponse",
]
