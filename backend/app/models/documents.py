"""Document request/response models."""

from datetime import datetime

from pydantic import BaseModel, Field

from backend.app.db.repositories import DocumentRecord


class DocumentSummary(BaseModel):
    """What a requester sees when choosing documents to ask for."""

    id: int
    name: str
    content_type: str

    @classmethod
    def from_record(cls, record: DocumentRecord) -> "DocumentSummary":
        return cls(id=record.id, name=record.name, content_type=record.content_type)


class DocumentResponse(BaseModel):
    """Full document metadata for its owner."""

    id: int
    owner_id: int
    name: str
    content_type: str
    size_bytes: int
    created_at: datetime

    @classmethod
    def from_record(cls, record: DocumentRecord) -> "DocumentResponse":
        return cls(
            id=record.id,
            owner_id=record.owner_id,
            name=record.name,
            content_type=record.content_type,
            size_bytes=record.size_bytes,
            created_at=record.created_at,
        )


class RenameDocumentRequest(BaseModel):
    """Request body for PATCH /api/documents/{id}."""

    name: str | None = Field(None, description="New document name")
