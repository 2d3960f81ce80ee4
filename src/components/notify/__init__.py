"""
Notify component - Invitation email dispatch.
"""

from .component import dispatch_invite_email, run, run_send
from .models import NotifyConfig, SendInviteEmailInput, SendInviteEmailOutput
from .ports import EmailSenderPort

__all__ = [
    # Entry points
    "run",
    "run_send",
    "dispatch_invite_email",
    # Models
    "NotifyConfig",
    "SendInviteEmailInput",
    "SendInviteEmailOutput",
    # Ports
    "EmailSenderPort",
]
