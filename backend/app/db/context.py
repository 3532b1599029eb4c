"""Per-visitor session state used by every authorization check."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class VisitorSession:
    """Session state keyed by an opaque token.

    Holds two independent facts: the owner identity set at login, and a PIN
    elevation scoped to exactly one target user.
    """

    token: str
    authenticated_user_id: int | None = None
    verified_owner_id: int | None = None
    verified_until: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)

    def is_verified_for(self, owner_id: int, now: datetime | None = None) -> bool:
        """Return True if the PIN elevation covers ``owner_id`` at ``now``."""
        if self.verified_owner_id is None or self.verified_owner_id != owner_id:
            return False
        if self.verified_until is None:
            return True
        return (now or utcnow()) < self.verified_until

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "authenticated_user_id": self.authenticated_user_id,
            "verified_owner_id": self.verified_owner_id,
            "verified_until": self.verified_until.isoformat() if self.verified_until else None,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "VisitorSession":
        verified_until = data.get("verified_until")
        return cls(
            token=data["token"],
            authenticated_user_id=data.get("authenticated_user_id"),
            verified_owner_id=data.get("verified_owner_id"),
            verified_until=datetime.fromisoformat(verified_until) if verified_until else None,
            created_at=datetime.fromisoformat(data["created_at"]),
        )
