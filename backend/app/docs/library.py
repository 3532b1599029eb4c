"""Owner-facing document operations and gated reads.

Names are unique per owner: uploads and renames into an existing name fail
with a conflict and leave the store unchanged.
"""

import logging
import unicodedata

from backend.app.access.decision import authorize_read
from backend.app.db.context import VisitorSession
from backend.app.db.repositories import DocumentRecord, RecordStore
from backend.app.errors import InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def validate_document_name(name: str | None) -> str:
    """Return a usable document name.

    Raises:
        InvalidInputError: If the name is missing, too long or has control characters
    """
    if name is None or not name.strip():
        raise InvalidInputError("Document name is required")

    if len(name) > MAX_NAME_LENGTH:
        raise InvalidInputError(f"Document name must be at most {MAX_NAME_LENGTH} characters")

    if any(unicodedata.category(ch) == "Cc" for ch in name):
        raise InvalidInputError("Document name contains control characters")

    return name


def upload_document(
    store: RecordStore,
    owner_id: int,
    name: str | None,
    content: bytes | None,
    content_type: str | None,
    *,
    max_bytes: int,
) -> DocumentRecord:
    """Store a new document for ``owner_id``.

    Raises:
        InvalidInputError: If the file or name is missing, or the file is too large
        DocumentNameConflictError: If the owner already has a document with this name
    """
    if content is None:
        raise InvalidInputError("No file uploaded")

    name = validate_document_name(name)

    if len(content) > max_bytes:
        raise InvalidInputError(f"File exceeds the {max_bytes} byte limit")

    document = store.documents.create_document(
        owner_id, name, content_type or DEFAULT_CONTENT_TYPE, content
    )
    logger.info("Document %s uploaded by user %s (%d bytes)", document.id, owner_id, len(content))
    return document


def list_owned_documents(store: RecordStore, owner_id: int) -> list[DocumentRecord]:
    """Metadata for every document ``owner_id`` owns. Payloads are not loaded."""
    return store.documents.list_documents(owner_id)


def get_owned_document(store: RecordStore, owner_id: int, document_id: int) -> DocumentRecord:
    """Fetch a document the caller owns.

    Raises:
        NotFoundError: If it does not exist or belongs to someone else
    """
    document = store.documents.get_document(document_id)
    if document is None or document.owner_id != owner_id:
        raise NotFoundError("Document not found")
    return document


def rename_document(
    store: RecordStore, owner_id: int, document_id: int, new_name: str | None
) -> DocumentRecord:
    """Rename one of the caller's documents.

    Raises:
        NotFoundError: If it does not exist or belongs to someone else
        InvalidInputError: If the new name is unusable
        DocumentNameConflictError: If another of the owner's documents has that name
    """
    document = get_owned_document(store, owner_id, document_id)
    new_name = validate_document_name(new_name)

    if new_name == document.name:
        return document

    renamed = store.documents.rename_document(document_id, new_name)
    if renamed is None:
        raise NotFoundError("Document not found")
    return renamed


def delete_document(store: RecordStore, owner_id: int, document_id: int) -> None:
    """Delete one of the caller's documents.

    Raises:
        NotFoundError: If it does not exist or belongs to someone else
    """
    get_owned_document(store, owner_id, document_id)
    if not store.documents.delete_document(document_id):
        raise NotFoundError("Document not found")
    logger.info("Document %s deleted by user %s", document_id, owner_id)


def read_document(
    store: RecordStore,
    visitor: VisitorSession | None,
    document_id: int,
    action: str,
) -> tuple[DocumentRecord, bytes]:
    """Load a document and its payload after the read gate allows it.

    Raises:
        ForbiddenError: If the document is missing or the visitor may not read it
    """
    document = authorize_read(visitor, store.documents.get_document(document_id), document_id, action)

    content = store.documents.get_content(document.id)
    if content is None:
        # deleted between the two reads
        raise NotFoundError("Document not found")

    return document, content
