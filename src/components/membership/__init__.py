"""
Membership component - Member removal and role changes.
"""

from .component import (
    run,
    run_remove,
    run_update_role,
)
from .models import (
    RemoveMemberInput,
    RemoveOutput,
    UpdateRoleInput,
    UpdateRoleOutput,
)
from .ports import MembershipStorePort

__all__ = [
    # Entry points
    "run",
    "run_remove",
    "run_update_role",
    # Input models
    "RemoveMemberInput",
    "UpdateRoleInput",
    # Output models
    "RemoveOutput",
    "UpdateRoleOutput",
    # Ports
    "MembershipStorePort",
]
