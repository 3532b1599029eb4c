"""Document endpoints - upload, list, rename, delete, view, download."""

from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from backend.app.api.auth import get_current_user_id, get_visitor_session
from backend.app.config import Settings, get_settings
from backend.app.db.context import VisitorSession
from backend.app.db.engine import get_record_store
from backend.app.db.repositories import RecordStore
from backend.app.docs.library import (
    delete_document,
    list_owned_documents,
    read_document,
    rename_document,
    upload_document,
)
from backend.app.models.documents import (
    DocumentResponse,
    DocumentSummary,
    RenameDocumentRequest,
)

router = APIRouter(prefix="/api/documents", tags=["documents"])


def content_disposition(disposition: str, filename: str) -> str:
    """Build a Content-Disposition header value for ``filename``.

    Non-ASCII names get an RFC 5987 ``filename*`` parameter alongside a
    sanitized ASCII fallback.
    """
    fallback = filename.encode("ascii", "replace").decode("ascii")
    fallback = fallback.replace("\\", "_").replace('"', "_")

    value = f'{disposition}; filename="{fallback}"'
    if fallback != filename:
        value += f"; filename*=utf-8''{quote(filename)}"
    return value


@router.get("", response_model=list[DocumentResponse])
def list_my_documents(
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> list[DocumentResponse]:
    """List the caller's own documents."""
    return [DocumentResponse.from_record(doc) for doc in list_owned_documents(store, user_id)]


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
def create_document(
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[RecordStore, Depends(get_record_store)],
    settings: Annotated[Settings, Depends(get_settings)],
    file: Annotated[UploadFile | None, File()] = None,
    name: Annotated[str | None, Form()] = None,
) -> DocumentResponse:
    """Upload a document (multipart ``file`` + ``name``)."""
    content = None
    content_type = None
    if file is not None:
        # one byte past the limit is enough to reject
        content = file.file.read(settings.max_upload_bytes + 1)
        content_type = file.content_type

    document = upload_document(
        store,
        user_id,
        name,
        content,
        content_type,
        max_bytes=settings.max_upload_bytes,
    )
    return DocumentResponse.from_record(document)


@router.get("/{owner_id}", response_model=list[DocumentSummary])
def list_owner_documents(
    owner_id: int,
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> list[DocumentSummary]:
    """List an owner's documents by name for a requester picking what to ask for."""
    return [DocumentSummary.from_record(doc) for doc in list_owned_documents(store, owner_id)]


@router.patch("/{document_id}", response_model=DocumentResponse)
def rename_document_endpoint(
    document_id: int,
    request: RenameDocumentRequest,
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> DocumentResponse:
    """Rename one of the caller's documents."""
    document = rename_document(store, user_id, document_id, request.name)
    return DocumentResponse.from_record(document)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document_endpoint(
    document_id: int,
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> Response:
    """Delete one of the caller's documents."""
    delete_document(store, user_id, document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{document_id}/view")
def view_document(
    document_id: int,
    visitor: Annotated[VisitorSession | None, Depends(get_visitor_session)],
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> Response:
    """Return document content inline, if the read gate allows it."""
    document, content = read_document(store, visitor, document_id, "view")
    return Response(
        content=content,
        media_type=document.content_type,
        headers={"Content-Disposition": content_disposition("inline", document.name)},
    )


@router.get("/{document_id}/download")
def download_document(
    document_id: int,
    visitor: Annotated[VisitorSession | None, Depends(get_visitor_session)],
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> Response:
    """Return document content as an attachment, if the read gate allows it."""
    document, content = read_document(store, visitor, document_id, "download")
    return Response(
        content=content,
        media_type=document.content_type,
        headers={"Content-Disposition": content_disposition("attachment", document.name)},
    )
