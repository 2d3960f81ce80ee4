"""
Invite component - Team invitation issuance and redemption.
"""

from .component import (
    TOKEN_NOT_FOUND,
    new_invite_token,
    run,
    run_issue,
    run_redeem,
)
from .models import (
    InviteSettings,
    IssueInviteInput,
    IssueInviteOutput,
    RedeemInviteInput,
    RedeemOutput,
)
from .ports import (
    IdentityPort,
    InviteStorePort,
    TimePort,
)

__all__ = [
    # Entry points
    "run",
    "run_issue",
    "run_redeem",
    "new_invite_token",
    "TOKEN_NOT_FOUND",
    # Input models
    "InviteSettings",
    "IssueInviteInput",
    "RedeemInviteInput",
    # Output models
    "IssueInviteOutput",
    "RedeemOutput",
    # Ports
    "IdentityPort",
    "InviteStorePort",
    "TimePort",
]
