"""Account request/response models."""

from pydantic import BaseModel, EmailStr, Field

from backend.app.db.repositories import UserRecord


class CredentialsRequest(BaseModel):
    """Request body for POST /api/register and POST /api/login."""

    email: EmailStr
    pin: str = Field(..., min_length=1, max_length=64, description="Numeric PIN")


class UserResponse(BaseModel):
    """Public view of a user. The PIN hash is never serialized."""

    id: int
    email: str

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserResponse":
        return cls(id=record.id, email=record.email)
