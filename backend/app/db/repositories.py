"""Repository protocol interfaces for data access."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Literal, Protocol

from backend.app.db.context import VisitorSession, utcnow

ALL_DOCUMENTS = "all"

RequestedDocuments = list[int] | Literal["all"]


@dataclass(frozen=True)
class UserRecord:
    """User data record. ``pin_hash`` never leaves the service layer."""

    id: int
    email: str
    pin_hash: str


@dataclass(frozen=True)
class DocumentRecord:
    """Document metadata record (payload stored separately)."""

    id: int
    owner_id: int
    name: str
    content_type: str
    size_bytes: int
    created_at: datetime


@dataclass(frozen=True)
class RequesterInfo:
    """Who asked for access, as declared by the requester's client."""

    device_info: str
    location: str | None = None
    timestamp: datetime = field(default_factory=utcnow)


class AccessRequestStatus(str, Enum):
    """Access request status."""

    pending = "pending"
    approved = "approved"
    denied = "denied"


@dataclass(frozen=True)
class AccessRequestRecord:
    """Access request data record."""

    id: int
    target_user_id: int
    requested_documents: RequestedDocuments
    requester_info: RequesterInfo
    status: AccessRequestStatus


class UserRepository(Protocol):
    """Repository for user accounts."""

    def create_user(self, email: str, pin_hash: str) -> UserRecord:
        """Create a user.

        Raises:
            ConflictError: If the email is already registered
        """
        ...

    def get_user(self, user_id: int) -> UserRecord | None:
        """Get user by ID."""
        ...

    def get_user_by_email(self, email: str) -> UserRecord | None:
        """Get user by email."""
        ...


class DocumentRepository(Protocol):
    """Repository for document metadata and payloads."""

    def create_document(
        self, owner_id: int, name: str, content_type: str, content: bytes
    ) -> DocumentRecord:
        """Store a new document.

        Raises:
            DocumentNameConflictError: If the owner already has a document with this name
        """
        ...

    def get_document(self, document_id: int) -> DocumentRecord | None:
        """Get document metadata by ID."""
        ...

    def get_content(self, document_id: int) -> bytes | None:
        """Get the document payload by ID."""
        ...

    def list_documents(self, owner_id: int) -> list[DocumentRecord]:
        """List an owner's document metadata in creation order."""
        ...

    def rename_document(self, document_id: int, name: str) -> DocumentRecord | None:
        """Rename a document.

        Returns:
            Updated record, or None if the document does not exist

        Raises:
            DocumentNameConflictError: If the owner already has a document with this name
        """
        ...

    def delete_document(self, document_id: int) -> bool:
        """Delete a document and its payload. Returns False if it did not exist."""
        ...


class AccessRequestRepository(Protocol):
    """Repository for access requests. Requests are never deleted."""

    def create_request(
        self,
        target_user_id: int,
        requested_documents: RequestedDocuments,
        requester_info: RequesterInfo,
    ) -> AccessRequestRecord:
        """Create a pending access request."""
        ...

    def get_request(self, request_id: int) -> AccessRequestRecord | None:
        """Get access request by ID."""
        ...

    def list_requests(self, target_user_id: int) -> list[AccessRequestRecord]:
        """List requests targeting a user in creation order."""
        ...

    def update_status(
        self,
        request_id: int,
        status: AccessRequestStatus,
        *,
        expected: AccessRequestStatus | None = None,
    ) -> AccessRequestRecord | None:
        """Set request status.

        Args:
            request_id: Access request ID
            status: New status
            expected: If given, only update while the stored status still equals it

        Returns:
            Updated record, or None if the request does not exist

        Raises:
            InvalidTransitionError: If ``expected`` no longer matches
        """
        ...


@dataclass
class RecordStore:
    """The three record collections the service persists."""

    users: UserRepository
    documents: DocumentRepository
    access_requests: AccessRequestRepository


class SessionStore(Protocol):
    """Store for visitor sessions keyed by opaque token."""

    def create(self) -> VisitorSession:
        """Create and persist an empty session with a fresh token."""
        ...

    def get(self, token: str) -> VisitorSession | None:
        """Get a live session, or None if unknown or expired."""
        ...

    def save(self, session: VisitorSession) -> None:
        """Persist session state."""
        ...

    def delete(self, token: str) -> None:
        """Forget a session."""
        ...


@dataclass
class RetryAfter:
    """Rate limit retry-after information."""

    seconds: int


class RateLimiter(Protocol):
    """Rate limiter interface."""

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available.

        Args:
            key: Rate limit key
            now: Current timestamp

        Returns:
            RetryAfter if over quota, None if allowed
        """
        ...
