"""
Membership Store Adapter Interface.

Protocol-based interface for membership persistence.
Implementations: in-memory (tests, dev), SQLite (self-hosted).

Three capabilities are required of every backend:
- Point read of a single keyed record (member, profile, invite)
- Collection-wide lookup of an invite by token, without knowing its company
- An atomic batch of writes/deletes that commits all-or-nothing

Invariants:
- Member and UserProfile for the same uid are only ever written together,
  inside one WriteBatch (see src.core.services.roster)
- Invite tokens are unique across every company; create_invite on an
  existing token fails the whole batch
- A must-exist delete/update of a missing record fails the whole batch;
  this is what makes invite redemption single-use under concurrency
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from src.domain.entities import Member, PendingInvite, Role, UserProfile

# Profile fields a merge may touch
PROFILE_FIELDS = frozenset({"company_id", "role"})


# --- Batch Operations ---


@dataclass(frozen=True)
class SetMember:
    """Create or overwrite a member record."""

    member: Member


@dataclass(frozen=True)
class UpdateMemberRole:
    """Change the role of an existing member (fails if missing)."""

    company_id: str
    uid: str
    role: Role


@dataclass(frozen=True)
class DeleteMember:
    company_id: str
    uid: str
    must_exist: bool = True


@dataclass(frozen=True)
class MergeProfile:
    """
    Merge fields into a user profile, creating it if absent.

    Only the keys present in `fields` are written; others are left as is.
    """

    uid: str
    fields: dict[str, Any]

    def __post_init__(self) -> None:
        unknown = set(self.fields) - PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Unknown profile fields: {sorted(unknown)}")


@dataclass(frozen=True)
class CreateInvite:
    """Insert a pending invite (fails if the token already exists)."""

    invite: PendingInvite


@dataclass(frozen=True)
class DeleteInvite:
    company_id: str
    token: str
    must_exist: bool = True


BatchOp = SetMember | UpdateMemberRole | DeleteMember | MergeProfile | CreateInvite | DeleteInvite


@dataclass
class WriteBatch:
    """
    Ordered set of writes committed atomically by MembershipStorePort.commit.

    Builder methods return the batch so calls can be chained.
    """

    ops: list[BatchOp] = field(default_factory=list)

    def set_member(self, member: Member) -> WriteBatch:
        self.ops.append(SetMember(member))
        return self

    def update_member_role(self, company_id: str, uid: str, role: Role) -> WriteBatch:
        self.ops.append(UpdateMemberRole(company_id, uid, role))
        return self

    def delete_member(self, company_id: str, uid: str, *, must_exist: bool = True) -> WriteBatch:
        self.ops.append(DeleteMember(company_id, uid, must_exist))
        return self

    def merge_profile(self, uid: str, **fields: Any) -> WriteBatch:
        self.ops.append(MergeProfile(uid, dict(fields)))
        return self

    def create_invite(self, invite: PendingInvite) -> WriteBatch:
        self.ops.append(CreateInvite(invite))
        return self

    def delete_invite(self, company_id: str, token: str, *, must_exist: bool = True) -> WriteBatch:
        self.ops.append(DeleteInvite(company_id, token, must_exist))
        return self

    def __len__(self) -> int:
        return len(self.ops)


# --- Port ---


class MembershipStorePort(Protocol):
    """Persistence for members, pending invites and user profiles."""

    def get_member(self, company_id: str, uid: str) -> Member | None:
        """Point read of Member (company_id, uid)."""
        ...

    def get_profile(self, uid: str) -> UserProfile | None:
        """Point read of UserProfile (uid)."""
        ...

    def get_invite(self, company_id: str, token: str) -> PendingInvite | None:
        """Point read of an invite under a known company."""
        ...

    def find_invite_by_token(self, token: str) -> PendingInvite | None:
        """
        Look up an invite by token across all companies.

        Returns:
            The invite, or None if no company holds this token
        """
        ...

    def commit(self, batch: WriteBatch) -> None:
        """
        Apply every op in the batch, or none of them.

        Raises:
            RecordNotFoundError: A must-exist op targeted a missing record
            DuplicateRecordError: create_invite hit an existing token
            StoreError: Any other backend fault
        """
        ...


# --- Error Types ---


class StoreError(Exception):
    """Base class for membership store errors."""


class RecordNotFoundError(StoreError):
    """A must-exist operation targeted a record that is not there."""

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class DuplicateRecordError(StoreError):
    """An insert-only operation hit an existing key."""

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} already exists: {key}")
