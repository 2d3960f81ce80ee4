"""
Guard component - admin check for company-scoped mutations.

Reads Member (company_id, caller_id) and allows the call only when the
record exists with role admin. Callers must run it before staging any
write, so a denied request leaves storage untouched.
"""

from __future__ import annotations

from src.domain.errors import RosterError
from src.domain.policy import PolicyEngine

from .models import GuardOutput, RequireAdminInput
from .ports import MemberReaderPort

NOT_ADMIN_MESSAGE = "You must be a company admin to perform this action."


def require_admin(
    store: MemberReaderPort,
    caller_id: str,
    company_id: str,
    policy: PolicyEngine | None = None,
) -> RosterError | None:
    """Return None when the caller is an admin of the company, else PERMISSION_DENIED."""
    policy = policy or PolicyEngine()
    member = store.get_member(company_id, caller_id)
    if not policy.can_manage_members(member):
        return RosterError.denied(NOT_ADMIN_MESSAGE)
    return None


def run(inp: RequireAdminInput, *, store: MemberReaderPort) -> GuardOutput:
    error = require_admin(store, inp.caller_id, inp.company_id)
    if error:
        return GuardOutput(success=False, error=error)
    return GuardOutput(success=True)
