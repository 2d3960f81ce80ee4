from __future__ import annotations

from dataclasses import dataclass

from src.domain.entities import Caller, Role
from src.domain.errors import RosterError
from src.rules.models import Rules


@dataclass(frozen=True)
class InviteSettings:
    token_bytes: int = 32
    ttl_days: int | None = None  # None = invites never expire
    max_token_attempts: int = 3

    @classmethod
    def from_rules(cls, rules: Rules) -> InviteSettings:
        return cls(
            token_bytes=rules.invites.token_bytes,
            ttl_days=rules.invites.ttl_days,
            max_token_attempts=rules.invites.max_token_attempts,
        )


@dataclass
class IssueInviteInput:
    caller: Caller | None
    company_id: str
    email: str
    role: str


@dataclass
class RedeemInviteInput:
    caller: Caller | None
    token: str


@dataclass
class IssueInviteOutput:
    status: str | None = None  # "added" | "invited"
    email: str | None = None
    token: str | None = None
    email_sent: bool = False
    success: bool = False
    error: RosterError | None = None


@dataclass
class RedeemOutput:
    status: str | None = None  # "accepted"
    company_id: str | None = None
    role: Role | None = None
    success: bool = False
    error: RosterError | None = None
