"""In-memory membership store adapter.

Implements MembershipStorePort for tests and single-process dev runs.
Batches are applied to staged copies of the tables under a lock and only
swapped in once every op has succeeded, so a failing op leaves no trace.
"""

from __future__ import annotations

import threading

from src.core.ports.store import (
    CreateInvite,
    DeleteInvite,
    DeleteMember,
    DuplicateRecordError,
    MergeProfile,
    RecordNotFoundError,
    SetMember,
    UpdateMemberRole,
    WriteBatch,
)
from src.domain.entities import Member, PendingInvite, UserProfile

MemberKey = tuple[str, str]  # (company_id, uid)


class InMemoryMembershipStore:
    """In-memory membership storage - suitable for tests and single-process deployments."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._members: dict[MemberKey, Member] = {}
        self._profiles: dict[str, UserProfile] = {}
        self._invites: dict[str, PendingInvite] = {}  # token -> invite
        self.commit_count = 0

    # --- Reads ---

    def get_member(self, company_id: str, uid: str) -> Member | None:
        return self._members.get((company_id, uid))

    def get_profile(self, uid: str) -> UserProfile | None:
        return self._profiles.get(uid)

    def get_invite(self, company_id: str, token: str) -> PendingInvite | None:
        invite = self._invites.get(token)
        if invite is None or invite.company_id != company_id:
            return None
        return invite

    def find_invite_by_token(self, token: str) -> PendingInvite | None:
        return self._invites.get(token)

    # --- Writes ---

    def commit(self, batch: WriteBatch) -> None:
        with self._lock:
            members = dict(self._members)
            profiles = dict(self._profiles)
            invites = dict(self._invites)

            for op in batch.ops:
                if isinstance(op, SetMember):
                    members[(op.member.company_id, op.member.uid)] = op.member

                elif isinstance(op, UpdateMemberRole):
                    key = (op.company_id, op.uid)
                    current = members.get(key)
                    if current is None:
                        raise RecordNotFoundError("member", f"{op.company_id}/{op.uid}")
                    members[key] = current.model_copy(update={"role": op.role})

                elif isinstance(op, DeleteMember):
                    key = (op.company_id, op.uid)
                    if key not in members and op.must_exist:
                        raise RecordNotFoundError("member", f"{op.company_id}/{op.uid}")
                    members.pop(key, None)

                elif isinstance(op, MergeProfile):
                    current_profile = profiles.get(op.uid) or UserProfile(uid=op.uid)
                    profiles[op.uid] = UserProfile.model_validate(
                        {**current_profile.model_dump(), **op.fields}
                    )

                elif isinstance(op, CreateInvite):
                    if op.invite.token in invites:
                        raise DuplicateRecordError("invite", op.invite.token[:8])
                    invites[op.invite.token] = op.invite

                elif isinstance(op, DeleteInvite):
                    existing = invites.get(op.token)
                    if existing is None or existing.company_id != op.company_id:
                        if op.must_exist:
                            raise RecordNotFoundError("invite", op.token[:8])
                        continue
                    del invites[op.token]

                else:
                    raise ValueError(f"Unsupported batch op: {type(op).__name__}")

            self._members = members
            self._profiles = profiles
            self._invites = invites
            self.commit_count += 1

    # --- Test Helpers ---

    def list_members(self, company_id: str) -> list[Member]:
        return [m for (cid, _), m in self._members.items() if cid == company_id]

    def list_invites(self, company_id: str) -> list[PendingInvite]:
        return [i for i in self._invites.values() if i.company_id == company_id]

    def clear(self) -> None:
        """Clear all records - useful for testing."""
        with self._lock:
            self._members.clear()
            self._profiles.clear()
            self._invites.clear()
