"""User model."""
import enum
from typing import Optional

from app.models.base import Document


class Role(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


class PublicUser(Document):
    """User as returned to clients: no password hash, no refresh token."""

    user_id: str
    email: str
    name: str
    role: Role = Role.USER
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class UserRecord(PublicUser):
    """Row in the users table, keyed by email."""

    password: str
    refresh_token: Optional[str] = None

    def public(self) -> PublicUser:
        return PublicUser.model_validate(self.model_dump(exclude={"password", "refresh_token"}))
