"""
SendGrid Email Adapter.

Implements EmailPort over the SendGrid v3 HTTP API with httpx.

Key behaviors:
- 202 Accepted -> QUEUED (SendGrid delivers asynchronously)
- Any other HTTP status -> FAILED with the provider's error text
- Network faults -> EmailSendError (retriable)
"""

from __future__ import annotations

import logging

import httpx

from src.core.ports.email import EmailAddress, EmailResult, EmailSendError

logger = logging.getLogger(__name__)

SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"


class SendGridEmailAdapter:
    def __init__(
        self,
        api_key: str,
        sender: EmailAddress,
        *,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
        api_url: str = SENDGRID_API_URL,
    ) -> None:
        if not api_key:
            raise ValueError("SendGrid API key is required")
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url
        self._client = client or httpx.Client(timeout=timeout)

    def _payload(
        self, recipient: str, subject: str, body_html: str, body_text: str | None
    ) -> dict[str, object]:
        sender: dict[str, str] = {"email": self.sender.email}
        if self.sender.name:
            sender["name"] = self.sender.name

        content = []
        if body_text:
            content.append({"type": "text/plain", "value": body_text})
        content.append({"type": "text/html", "value": body_html})

        return {
            "personalizations": [{"to": [{"email": recipient}]}],
            "from": sender,
            "subject": subject,
            "content": content,
        }

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        try:
            resp = self._client.post(
                self.api_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=self._payload(recipient, subject, body_html, body_text),
            )
        except httpx.HTTPError as e:
            raise EmailSendError(recipient, str(e)) from e

        if resp.status_code == 202:
            return EmailResult.queued(recipient, resp.headers.get("X-Message-Id"))

        logger.warning("SendGrid rejected email to %s: %s", recipient, resp.status_code)
        return EmailResult.failed(recipient, f"SendGrid {resp.status_code}: {resp.text[:200]}")

    def close(self) -> None:
        self._client.close()
