"""
Identity Provider Interface.

The identity provider owns accounts. The membership core only needs to
resolve an email to an account identifier; the authenticated caller of a
request is built by the transport layer (see src.api.deps).
"""

from __future__ import annotations

from typing import Protocol


class IdentityPort(Protocol):
    def get_uid_by_email(self, email: str) -> str | None:
        """
        Resolve an email to an account identifier.

        Returns:
            The uid, or None when no account uses this email.
            "Not found" is an expected outcome, not an error.
        """
        ...
