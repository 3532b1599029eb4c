"""Initial schema

Revision ID: 001
Revises:
Create Date: 2025-06-01

Creates:
- users
- documents (unique name per owner)
- document_contents (payloads, one row per document)
- access_requests
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all tables."""
    # users table
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("pin_hash", sa.Text(), nullable=False),
        sa.UniqueConstraint("email"),
    )

    # documents table
    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("content_type", sa.Text(), nullable=False),
        sa.Column("size_bytes", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
        sa.UniqueConstraint("owner_id", "name", name="uq_document_owner_name"),
    )
    op.create_index("idx_document_owner", "documents", ["owner_id"])

    # document_contents table
    op.create_table(
        "document_contents",
        sa.Column("document_id", sa.Integer(), primary_key=True),
        sa.Column("data", sa.LargeBinary(), nullable=False),
        sa.ForeignKeyConstraint(["document_id"], ["documents.id"], ondelete="CASCADE"),
    )

    # access_requests table
    op.create_table(
        "access_requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("target_user_id", sa.Integer(), nullable=False),
        sa.Column("requested_documents", sa.JSON(), nullable=False),
        sa.Column("device_info", sa.Text(), nullable=False),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["target_user_id"], ["users.id"]),
    )
    op.create_index("idx_access_request_target", "access_requests", ["target_user_id", "id"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("idx_access_request_target", table_name="access_requests")
    op.drop_table("access_requests")
    op.drop_table("document_contents")
    op.drop_index("idx_document_owner", table_name="documents")
    op.drop_table("documents")
    op.drop_table("users")
