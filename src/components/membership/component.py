"""
Membership component - admin-gated removal and role changes.

Both operations check, in order: caller present, required fields, role
(update only), caller is a company admin, target is not the caller. Only
then is a single batch committed through apply_membership_change.

A target with no Member record surfaces as RecordNotFoundError from the
store; it is not translated here.
"""

import logging

from src.components.guard import require_admin
from src.core.ports.store import WriteBatch
from src.core.services.roster import MembershipChange, apply_membership_change
from src.domain.errors import RosterError
from src.domain.policy import PolicyEngine

from .models import RemoveMemberInput, RemoveOutput, UpdateRoleInput, UpdateRoleOutput
from .ports import MembershipStorePort

logger = logging.getLogger(__name__)


def run_remove(
    inp: RemoveMemberInput,
    store: MembershipStorePort,
    policy: PolicyEngine | None = None,
) -> RemoveOutput:
    policy = policy or PolicyEngine()

    if inp.caller is None:
        return RemoveOutput(error=RosterError.unauthenticated())

    if not inp.target_uid or not inp.company_id:
        return RemoveOutput(error=RosterError.invalid("targetUid and companyId are required."))

    denied = require_admin(store, inp.caller.uid, inp.company_id, policy)
    if denied:
        return RemoveOutput(error=denied)

    if not policy.can_act_on(inp.caller.uid, inp.target_uid):
        return RemoveOutput(error=RosterError.invalid("You cannot remove yourself."))

    batch = apply_membership_change(
        WriteBatch(), MembershipChange.leave(inp.company_id, inp.target_uid)
    )
    store.commit(batch)

    logger.info("%s removed %s from company %s", inp.caller.uid, inp.target_uid, inp.company_id)
    return RemoveOutput(status="removed", target_uid=inp.target_uid, success=True)


def run_update_role(
    inp: UpdateRoleInput,
    store: MembershipStorePort,
    policy: PolicyEngine | None = None,
) -> UpdateRoleOutput:
    policy = policy or PolicyEngine()

    if inp.caller is None:
        return UpdateRoleOutput(error=RosterError.unauthenticated())

    if not inp.target_uid or not inp.role or not inp.company_id:
        return UpdateRoleOutput(
            error=RosterError.invalid("targetUid, role, and companyId are required.")
        )

    if not policy.validate_role(inp.role):
        return UpdateRoleOutput(error=RosterError.invalid_role())

    denied = require_admin(store, inp.caller.uid, inp.company_id, policy)
    if denied:
        return UpdateRoleOutput(error=denied)

    if not policy.can_act_on(inp.caller.uid, inp.target_uid):
        return UpdateRoleOutput(error=RosterError.invalid("You cannot change your own role."))

    batch = apply_membership_change(
        WriteBatch(), MembershipChange.role_change(inp.company_id, inp.target_uid, inp.role)
    )
    store.commit(batch)

    logger.info(
        "%s set role of %s in company %s to %s",
        inp.caller.uid,
        inp.target_uid,
        inp.company_id,
        inp.role,
    )
    return UpdateRoleOutput(
        status="updated", target_uid=inp.target_uid, role=inp.role, success=True
    )


def run(
    inp: RemoveMemberInput | UpdateRoleInput,
    *,
    store: MembershipStorePort,
    policy: PolicyEngine | None = None,
) -> RemoveOutput | UpdateRoleOutput:
    if isinstance(inp, RemoveMemberInput):
        return run_remove(inp, store, policy)

    elif isinstance(inp, UpdateRoleInput):
        return run_update_role(inp, store, policy)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
