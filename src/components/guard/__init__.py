"""
Guard component - Company admin authorization.
"""

from .component import NOT_ADMIN_MESSAGE, require_admin, run
from .models import GuardOutput, RequireAdminInput
from .ports import MemberReaderPort

__all__ = [
    # Entry points
    "run",
    "require_admin",
    "NOT_ADMIN_MESSAGE",
    # Models
    "RequireAdminInput",
    "GuardOutput",
    # Ports
    "MemberReaderPort",
]
