from typing import Any

from src.domain.entities import ROLES, Member


def validate_role(role: Any) -> bool:
    """True only for the exact strings admin, edit or view."""
    return isinstance(role, str) and role in ROLES


def is_admin(member: Member | None) -> bool:
    return member is not None and member.role == "admin"


class PolicyEngine:
    """
    Membership policy checks.

    Stateless; the store lookup that feeds `can_manage_members` is done by
    the authorization guard so that this class stays pure.
    """

    def validate_role(self, role: Any) -> bool:
        return validate_role(role)

    def can_manage_members(self, member: Member | None) -> bool:
        return is_admin(member)

    def can_act_on(self, actor_uid: str, target_uid: str) -> bool:
        # Admin-gated mutations never target the actor's own membership
        return actor_uid != target_uid
