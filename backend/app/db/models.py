"""SQLAlchemy ORM models for users, documents and access requests."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class User(Base):
    """User table - account email and hashed PIN."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    pin_hash: Mapped[str] = mapped_column(Text, nullable=False)

    # Relationships
    documents: Mapped[list["Document"]] = relationship("Document", back_populates="owner")


class Document(Base):
    """Document metadata table. Payload lives in ``document_contents``."""

    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_document_owner_name"),
        Index("idx_document_owner", "owner_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column(Text, nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    owner: Mapped["User"] = relationship("User", back_populates="documents")


class DocumentContent(Base):
    """Document payload table, keyed by document id."""

    __tablename__ = "document_contents"

    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True
    )
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)


class AccessRequest(Base):
    """Access request table - audit trail, rows are never deleted."""

    __tablename__ = "access_requests"
    __table_args__ = (Index("idx_access_request_target", "target_user_id", "id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    target_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    # list of document ids, or the string "all"
    requested_documents: Mapped[Any] = mapped_column(JSON, nullable=False)
    device_info: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    requested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False)
