"""
Email adapter for local runs and tests.

Nothing leaves the process: each message is logged and appended to
`sent_emails`, and the result is SKIPPED. The API wires it in when
`email.dev_fallback` is on and no SendGrid key is configured.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from src.core.ports.email import EmailResult

logger = logging.getLogger(__name__)


@dataclass
class SentEmail:
    id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str
    logged_at: datetime


@dataclass
class DevEmailAdapter:
    sent_emails: list[SentEmail] = field(default_factory=list)

    log_level: int = logging.INFO
    log_body: bool = False  # Invite bodies carry redemption links
    body_preview_length: int = 100
    fail_with: str | None = None  # Forces a FAILED result carrying this error

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        if self.fail_with:
            logger.log(self.log_level, "EMAIL (dev): To=%s simulated failure", recipient)
            return EmailResult.failed(recipient, self.fail_with)

        message_id = f"dev-{uuid4().hex[:12]}"
        record = SentEmail(
            id=message_id,
            recipient=recipient,
            subject=subject,
            body_html=body_html,
            body_text=body_text or "",
            logged_at=datetime.now(UTC),
        )
        self.sent_emails.append(record)
        logger.log(self.log_level, self._describe(record))

        return EmailResult.skipped(recipient, message_id, "Dev mode - email logged, not sent")

    def _describe(self, record: SentEmail) -> str:
        line = f"EMAIL (dev): To={record.recipient}, Subject={record.subject}"
        if self.log_body and record.body_html:
            body = record.body_html
            if len(body) > self.body_preview_length:
                body = body[: self.body_preview_length] + "..."
            line += f", Body={body}"
        return f"{line}, MessageID={record.id}"

    # --- Assertion helpers ---

    def get_last_email(self) -> SentEmail | None:
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        return [e for e in self.sent_emails if e.recipient == recipient]

    def clear(self) -> None:
        self.sent_emails.clear()

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)
