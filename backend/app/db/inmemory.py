"""In-memory implementations of repository interfaces."""

import secrets
import threading
from dataclasses import replace
from datetime import datetime, timedelta

from backend.app.db.context import VisitorSession, utcnow
from backend.app.db.repositories import (
    AccessRequestRecord,
    AccessRequestStatus,
    DocumentRecord,
    RecordStore,
    RequestedDocuments,
    RequesterInfo,
    RetryAfter,
    UserRecord,
)
from backend.app.errors import ConflictError, DocumentNameConflictError, InvalidTransitionError


class InMemoryUserRepository:
    """In-memory implementation of UserRepository."""

    def __init__(self) -> None:
        self._users: dict[int, UserRecord] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def create_user(self, email: str, pin_hash: str) -> UserRecord:
        """Create a user."""
        with self._lock:
            if any(user.email == email for user in self._users.values()):
                raise ConflictError("Email already registered")

            record = UserRecord(id=self._next_id, email=email, pin_hash=pin_hash)
            self._users[record.id] = record
            self._next_id += 1
            return record

    def get_user(self, user_id: int) -> UserRecord | None:
        """Get user by ID."""
        return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> UserRecord | None:
        """Get user by email."""
        for user in self._users.values():
            if user.email == email:
                return user
        return None


class InMemoryDocumentRepository:
    """In-memory implementation of DocumentRepository.

    Metadata and payloads live in separate maps so listings never touch
    document content.
    """

    def __init__(self) -> None:
        self._documents: dict[int, DocumentRecord] = {}
        self._contents: dict[int, bytes] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def _name_taken(self, owner_id: int, name: str, exclude_id: int | None = None) -> bool:
        return any(
            doc.owner_id == owner_id and doc.name == name and doc.id != exclude_id
            for doc in self._documents.values()
        )

    def create_document(
        self, owner_id: int, name: str, content_type: str, content: bytes
    ) -> DocumentRecord:
        """Store a new document."""
        with self._lock:
            if self._name_taken(owner_id, name):
                raise DocumentNameConflictError()

            record = DocumentRecord(
                id=self._next_id,
                owner_id=owner_id,
                name=name,
                content_type=content_type,
                size_bytes=len(content),
                created_at=utcnow(),
            )
            self._documents[record.id] = record
            self._contents[record.id] = content
            self._next_id += 1
            return record

    def get_document(self, document_id: int) -> DocumentRecord | None:
        """Get document metadata by ID."""
        return self._documents.get(document_id)

    def get_content(self, document_id: int) -> bytes | None:
        """Get the document payload by ID."""
        return self._contents.get(document_id)

    def list_documents(self, owner_id: int) -> list[DocumentRecord]:
        """List an owner's documents."""
        return [doc for doc in self._documents.values() if doc.owner_id == owner_id]

    def rename_document(self, document_id: int, name: str) -> DocumentRecord | None:
        """Rename a document."""
        with self._lock:
            record = self._documents.get(document_id)
            if record is None:
                return None

            if self._name_taken(record.owner_id, name, exclude_id=document_id):
                raise DocumentNameConflictError()

            updated = DocumentRecord(
                id=record.id,
                owner_id=record.owner_id,
                name=name,
                content_type=record.content_type,
                size_bytes=record.size_bytes,
                created_at=record.created_at,
            )
            self._documents[document_id] = updated
            return updated

    def delete_document(self, document_id: int) -> bool:
        """Delete a document and its payload."""
        with self._lock:
            self._contents.pop(document_id, None)
            return self._documents.pop(document_id, None) is not None


class InMemoryAccessRequestRepository:
    """In-memory implementation of AccessRequestRepository."""

    def __init__(self) -> None:
        self._requests: dict[int, AccessRequestRecord] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def create_request(
        self,
        target_user_id: int,
        requested_documents: RequestedDocuments,
        requester_info: RequesterInfo,
    ) -> AccessRequestRecord:
        """Create a pending access request."""
        with self._lock:
            record = AccessRequestRecord(
                id=self._next_id,
                target_user_id=target_user_id,
                requested_documents=requested_documents,
                requester_info=requester_info,
                status=AccessRequestStatus.pending,
            )
            self._requests[record.id] = record
            self._next_id += 1
            return record

    def get_request(self, request_id: int) -> AccessRequestRecord | None:
        """Get access request by ID."""
        return self._requests.get(request_id)

    def list_requests(self, target_user_id: int) -> list[AccessRequestRecord]:
        """List requests targeting a user."""
        # dict preserves insertion order, which is creation order
        return [req for req in self._requests.values() if req.target_user_id == target_user_id]

    def update_status(
        self,
        request_id: int,
        status: AccessRequestStatus,
        *,
        expected: AccessRequestStatus | None = None,
    ) -> AccessRequestRecord | None:
        """Set request status."""
        with self._lock:
            record = self._requests.get(request_id)
            if record is None:
                return None

            if expected is not None and record.status != expected:
                raise InvalidTransitionError()

            updated = AccessRequestRecord(
                id=record.id,
                target_user_id=record.target_user_id,
                requested_documents=record.requested_documents,
                requester_info=record.requester_info,
                status=status,
            )
            self._requests[request_id] = updated
            return updated


def create_inmemory_store() -> RecordStore:
    """Build a RecordStore backed by process memory."""
    return RecordStore(
        users=InMemoryUserRepository(),
        documents=InMemoryDocumentRepository(),
        access_requests=InMemoryAccessRequestRepository(),
    )


class InMemorySessionStore:
    """In-memory implementation of SessionStore with idle expiry.

    Expired sessions are dropped on lookup and by a sweep that runs at most
    once per ``sweep_interval_seconds`` when sessions are saved.
    """

    def __init__(self, ttl_seconds: int = 24 * 3600, sweep_interval_seconds: int = 60) -> None:
        self._ttl_seconds = ttl_seconds
        self._sweep_interval = timedelta(seconds=sweep_interval_seconds)
        self._sessions: dict[str, tuple[VisitorSession, datetime]] = {}
        self._next_sweep = utcnow() + self._sweep_interval
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def _sweep(self, now: datetime) -> None:
        expired = [token for token, (_, expires_at) in self._sessions.items() if now >= expires_at]
        for token in expired:
            del self._sessions[token]
        self._next_sweep = now + self._sweep_interval

    def create(self) -> VisitorSession:
        """Create and persist an empty session."""
        session = VisitorSession(token=secrets.token_urlsafe(32))
        self.save(session)
        return session

    def get(self, token: str) -> VisitorSession | None:
        """Get a live session."""
        with self._lock:
            entry = self._sessions.get(token)

            if entry is None:
                return None

            session, expires_at = entry

            # Check if expired
            if utcnow() >= expires_at:
                del self._sessions[token]
                return None

            return replace(session)

    def save(self, session: VisitorSession) -> None:
        """Persist session state and refresh its expiry."""
        now = utcnow()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            expires_at = now + timedelta(seconds=self._ttl_seconds)
            self._sessions[session.token] = (replace(session), expires_at)

    def delete(self, token: str) -> None:
        """Forget a session."""
        with self._lock:
            self._sessions.pop(token, None)


class InMemoryRateLimiter:
    """In-memory implementation of RateLimiter using fixed window."""

    def __init__(self, max_requests: int, window_seconds: int = 60) -> None:
        """Initialize rate limiter.

        Args:
            max_requests: Maximum requests per window
            window_seconds: Window size in seconds (default 60)
        """
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._windows: dict[str, tuple[datetime, int]] = {}

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available."""
        if key not in self._windows:
            self._windows[key] = (now, 1)
            return None

        window_start, count = self._windows[key]
        window_end = window_start + timedelta(seconds=self._window_seconds)

        if now >= window_end:
            self._windows[key] = (now, 1)
            return None

        if count >= self._max_requests:
            seconds_remaining = int((window_end - now).total_seconds())
            return RetryAfter(seconds=max(1, seconds_remaining))

        self._windows[key] = (window_start, count + 1)
        return None
