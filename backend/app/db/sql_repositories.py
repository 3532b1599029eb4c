"""SQL implementations of repository interfaces.

Each method runs in its own short-lived session, so a single create or update
is atomic and nothing spans calls.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from backend.app.db.context import utcnow
from backend.app.db.models import AccessRequest, Document, DocumentContent, User
from backend.app.db.queries import query_owned_documents, query_targeted_requests
from backend.app.db.repositories import (
    AccessRequestRecord,
    AccessRequestStatus,
    DocumentRecord,
    RecordStore,
    RequestedDocuments,
    RequesterInfo,
    UserRecord,
)
from backend.app.errors import (
    ConflictError,
    DocumentNameConflictError,
    InvalidTransitionError,
    StoreUnavailableError,
)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_user_record(user: User) -> UserRecord:
    return UserRecord(id=user.id, email=user.email, pin_hash=user.pin_hash)


def _to_document_record(doc: Document) -> DocumentRecord:
    return DocumentRecord(
        id=doc.id,
        owner_id=doc.owner_id,
        name=doc.name,
        content_type=doc.content_type,
        size_bytes=doc.size_bytes,
        created_at=_as_utc(doc.created_at),
    )


def _to_request_record(req: AccessRequest) -> AccessRequestRecord:
    return AccessRequestRecord(
        id=req.id,
        target_user_id=req.target_user_id,
        requested_documents=req.requested_documents,
        requester_info=RequesterInfo(
            device_info=req.device_info,
            location=req.location,
            timestamp=_as_utc(req.requested_at),
        ),
        status=AccessRequestStatus(req.status),
    )


class _SqlRepository:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self._session_factory() as session:
                yield session
        except OperationalError as e:
            raise StoreUnavailableError() from e


class SqlUserRepository(_SqlRepository):
    """SQL implementation of UserRepository."""

    def create_user(self, email: str, pin_hash: str) -> UserRecord:
        """Create a user."""
        with self._session() as session:
            user = User(email=email, pin_hash=pin_hash)
            session.add(user)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise ConflictError("Email already registered") from e

            return _to_user_record(user)

    def get_user(self, user_id: int) -> UserRecord | None:
        """Get user by ID."""
        with self._session() as session:
            user = session.get(User, user_id)
            return _to_user_record(user) if user else None

    def get_user_by_email(self, email: str) -> UserRecord | None:
        """Get user by email."""
        with self._session() as session:
            user = session.query(User).filter(User.email == email).first()
            return _to_user_record(user) if user else None


class SqlDocumentRepository(_SqlRepository):
    """SQL implementation of DocumentRepository.

    The ``uq_document_owner_name`` constraint backs up the name pre-check, so
    two racing renames cannot both land.
    """

    def create_document(
        self, owner_id: int, name: str, content_type: str, content: bytes
    ) -> DocumentRecord:
        """Store a new document."""
        with self._session() as session:
            if query_owned_documents(session, owner_id).filter(Document.name == name).first():
                raise DocumentNameConflictError()

            doc = Document(
                owner_id=owner_id,
                name=name,
                content_type=content_type,
                size_bytes=len(content),
                created_at=utcnow(),
            )
            session.add(doc)
            try:
                session.flush()
                session.add(DocumentContent(document_id=doc.id, data=content))
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise DocumentNameConflictError() from e

            return _to_document_record(doc)

    def get_document(self, document_id: int) -> DocumentRecord | None:
        """Get document metadata by ID."""
        with self._session() as session:
            doc = session.get(Document, document_id)
            return _to_document_record(doc) if doc else None

    def get_content(self, document_id: int) -> bytes | None:
        """Get the document payload by ID."""
        with self._session() as session:
            content = session.get(DocumentContent, document_id)
            return content.data if content else None

    def list_documents(self, owner_id: int) -> list[DocumentRecord]:
        """List an owner's documents."""
        with self._session() as session:
            return [_to_document_record(doc) for doc in query_owned_documents(session, owner_id)]

    def rename_document(self, document_id: int, name: str) -> DocumentRecord | None:
        """Rename a document."""
        with self._session() as session:
            doc = session.get(Document, document_id)
            if doc is None:
                return None

            if doc.name == name:
                return _to_document_record(doc)

            clash = (
                query_owned_documents(session, doc.owner_id)
                .filter(Document.name == name, Document.id != document_id)
                .first()
            )
            if clash is not None:
                raise DocumentNameConflictError()

            doc.name = name
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise DocumentNameConflictError() from e

            return _to_document_record(doc)

    def delete_document(self, document_id: int) -> bool:
        """Delete a document and its payload."""
        with self._session() as session:
            doc = session.get(Document, document_id)
            if doc is None:
                return False

            session.query(DocumentContent).filter(
                DocumentContent.document_id == document_id
            ).delete(synchronize_session=False)
            session.delete(doc)
            session.commit()
            return True


class SqlAccessRequestRepository(_SqlRepository):
    """SQL implementation of AccessRequestRepository."""

    def create_request(
        self,
        target_user_id: int,
        requested_documents: RequestedDocuments,
        requester_info: RequesterInfo,
    ) -> AccessRequestRecord:
        """Create a pending access request."""
        with self._session() as session:
            req = AccessRequest(
                target_user_id=target_user_id,
                requested_documents=requested_documents,
                device_info=requester_info.device_info,
                location=requester_info.location,
                requested_at=requester_info.timestamp,
                status=AccessRequestStatus.pending.value,
            )
            session.add(req)
            session.commit()
            return _to_request_record(req)

    def get_request(self, request_id: int) -> AccessRequestRecord | None:
        """Get access request by ID."""
        with self._session() as session:
            req = session.get(AccessRequest, request_id)
            return _to_request_record(req) if req else None

    def list_requests(self, target_user_id: int) -> list[AccessRequestRecord]:
        """List requests targeting a user."""
        with self._session() as session:
            return [
                _to_request_record(req)
                for req in query_targeted_requests(session, target_user_id)
            ]

    def update_status(
        self,
        request_id: int,
        status: AccessRequestStatus,
        *,
        expected: AccessRequestStatus | None = None,
    ) -> AccessRequestRecord | None:
        """Set request status as a single conditional UPDATE."""
        with self._session() as session:
            if session.get(AccessRequest, request_id) is None:
                return None

            query = session.query(AccessRequest).filter(AccessRequest.id == request_id)
            if expected is not None:
                query = query.filter(AccessRequest.status == expected.value)

            updated = query.update({"status": status.value}, synchronize_session=False)
            if updated == 0:
                session.rollback()
                raise InvalidTransitionError()

            session.commit()
            req = session.get(AccessRequest, request_id, populate_existing=True)
            return _to_request_record(req)


def create_sql_store(session_factory: sessionmaker[Session]) -> RecordStore:
    """Build a RecordStore backed by SQLAlchemy sessions."""
    return RecordStore(
        users=SqlUserRepository(session_factory),
        documents=SqlDocumentRepository(session_factory),
        access_requests=SqlAccessRequestRepository(session_factory),
    )
