"""
Email port for invitation delivery.

Adapters:
1. DevEmailAdapter: logs the message and keeps it in memory
2. SendGridEmailAdapter: SendGrid v3 HTTP API

An unconfigured deployment passes `None` instead of an adapter. Invite
issuance then only logs; the direct-send operation fails.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class EmailStatus(Enum):
    QUEUED = "queued"  # Provider accepted it; delivery is asynchronous
    SKIPPED = "skipped"  # Logged by the dev adapter, never sent
    FAILED = "failed"


@dataclass(frozen=True)
class EmailAddress:
    email: str
    name: str | None = None


@dataclass
class EmailResult:
    recipient: str
    status: EmailStatus
    message_id: str | None = None  # Provider's message ID
    error: str | None = None
    at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def accepted(self) -> bool:
        """Anything short of an explicit rejection counts as delivered."""
        return self.status != EmailStatus.FAILED

    @classmethod
    def queued(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        return cls(recipient, EmailStatus.QUEUED, message_id=message_id)

    @classmethod
    def skipped(cls, recipient: str, message_id: str, reason: str) -> EmailResult:
        return cls(recipient, EmailStatus.SKIPPED, message_id=message_id, error=reason)

    @classmethod
    def failed(cls, recipient: str, error: str) -> EmailResult:
        return cls(recipient, EmailStatus.FAILED, error=error)


class EmailPort(Protocol):
    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        """
        Send one message.

        Provider rejections come back as a FAILED result; transport faults
        raise EmailSendError.
        """
        ...


# --- Error Types ---


class EmailError(Exception):
    """Base exception for email-related errors."""


class EmailSendError(EmailError):
    def __init__(self, recipient: str, error: str, retriable: bool = True) -> None:
        self.recipient = recipient
        self.error = error
        self.retriable = retriable
        super().__init__(f"Failed to send email to {recipient}: {error}")
