from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

# --- Enums / Literals ---
Role = Literal["admin", "edit", "view"]
ROLES: tuple[str, ...] = ("admin", "edit", "view")


def _utcnow() -> datetime:
    return datetime.now(UTC)


# --- Identity ---

class Caller(BaseModel):
    """Authenticated identity of the current request."""

    uid: str
    email: str


class Account(BaseModel):
    uid: str
    email: str
    password_hash: str
    created_at: datetime = Field(default_factory=_utcnow)


# --- Membership ---

class Member(BaseModel):
    company_id: str
    uid: str
    email: str
    role: Role
    added_at: datetime = Field(default_factory=_utcnow)


class PendingInvite(BaseModel):
    token: str
    company_id: str  # parent company
    email: str
    role: Role
    invited_by: str
    invited_at: datetime = Field(default_factory=_utcnow)


class UserProfile(BaseModel):
    """Denormalized copy of the account's current membership."""

    uid: str
    company_id: str | None = None
    role: Role | None = None
