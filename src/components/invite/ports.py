from datetime import datetime
from typing import Protocol

from src.core.ports.store import WriteBatch
from src.domain.entities import Member, PendingInvite, UserProfile


class InviteStorePort(Protocol):
    def get_member(self, company_id: str, uid: str) -> Member | None: ...
    def get_profile(self, uid: str) -> UserProfile | None: ...
    def find_invite_by_token(self, token: str) -> PendingInvite | None: ...
    def commit(self, batch: WriteBatch) -> None: ...


class IdentityPort(Protocol):
    def get_uid_by_email(self, email: str) -> str | None: ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
