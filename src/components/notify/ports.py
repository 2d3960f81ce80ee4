from typing import Protocol

from src.core.ports.email import EmailResult


class EmailSenderPort(Protocol):
    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult: ...
