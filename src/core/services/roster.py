"""
Roster primitive - the single place Member and UserProfile are written.

Every mutation path (direct add, invite redemption, role change, removal)
describes its effect as a MembershipChange and stages it onto a WriteBatch
through `apply_membership_change`. The Member record and the user's profile
are therefore always written in the same atomic batch.

Key behaviors:
- join:  set Member, merge profile {company_id, role}
- role:  update Member.role (must exist), merge profile {role}
- leave: delete Member (must exist), merge profile {company_id: None, role: None}
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from src.core.ports.store import WriteBatch
from src.domain.entities import Member, Role

ChangeKind = Literal["join", "role", "leave"]


@dataclass(frozen=True)
class MembershipChange:
    """Description of one membership mutation for one uid."""

    kind: ChangeKind
    company_id: str
    uid: str
    role: Role | None = None
    email: str | None = None
    at: datetime | None = None

    @classmethod
    def join(cls, company_id: str, uid: str, email: str, role: Role, at: datetime) -> MembershipChange:
        return cls("join", company_id, uid, role=role, email=email, at=at)

    @classmethod
    def role_change(cls, company_id: str, uid: str, role: Role) -> MembershipChange:
        return cls("role", company_id, uid, role=role)

    @classmethod
    def leave(cls, company_id: str, uid: str) -> MembershipChange:
        return cls("leave", company_id, uid)


def apply_membership_change(batch: WriteBatch, change: MembershipChange) -> WriteBatch:
    """
    Stage both halves of a membership change onto `batch`.

    Raises:
        ValueError: If the change is missing a field its kind requires
    """
    if change.kind == "join":
        if change.role is None or change.email is None or change.at is None:
            raise ValueError("join requires role, email and at")
        batch.set_member(
            Member(
                company_id=change.company_id,
                uid=change.uid,
                email=change.email,
                role=change.role,
                added_at=change.at,
            )
        )
        batch.merge_profile(change.uid, company_id=change.company_id, role=change.role)

    elif change.kind == "role":
        if change.role is None:
            raise ValueError("role change requires role")
        batch.update_member_role(change.company_id, change.uid, change.role)
        # profile keeps its company_id
        batch.merge_profile(change.uid, role=change.role)

    elif change.kind == "leave":
        batch.delete_member(change.company_id, change.uid, must_exist=True)
        batch.merge_profile(change.uid, company_id=None, role=None)

    else:
        raise ValueError(f"Unknown membership change: {change.kind}")

    return batch
