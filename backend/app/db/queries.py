"""Owner-scoped query helpers."""

from sqlalchemy.orm import Query, Session

from backend.app.db.models import AccessRequest, Document


def query_owned_documents(session: Session, owner_id: int) -> Query:
    """Query documents table with owner scoping enforced.

    Args:
        session: SQLAlchemy session
        owner_id: Owning user ID

    Returns:
        Query filtered by owner_id, ordered by id
    """
    return session.query(Document).filter(Document.owner_id == owner_id).order_by(Document.id)


def query_targeted_requests(session: Session, target_user_id: int) -> Query:
    """Query access_requests table for one target user in creation order."""
    return (
        session.query(AccessRequest)
        .filter(AccessRequest.target_user_id == target_user_id)
        .order_by(AccessRequest.id)
    )
