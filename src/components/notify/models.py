from __future__ import annotations

from dataclasses import dataclass

from src.core.services.invite_email import DEFAULT_SUBJECT
from src.domain.entities import Caller
from src.domain.errors import RosterError
from src.rules.models import Rules


@dataclass(frozen=True)
class NotifyConfig:
    """Out-of-band email settings (the API key lives with the adapter)."""

    app_name: str
    base_url: str
    subject_template: str = DEFAULT_SUBJECT

    @classmethod
    def from_rules(cls, rules: Rules, base_url: str | None = None) -> NotifyConfig:
        return cls(
            app_name=rules.email.app_name,
            base_url=base_url or rules.app.base_url,
            subject_template=rules.email.subject,
        )


@dataclass(frozen=True)
class SendInviteEmailInput:
    caller: Caller | None
    to: str
    invite_url: str
    role: str | None = None


@dataclass(frozen=True)
class SendInviteEmailOutput:
    to: str | None = None
    status: str | None = None  # "sent" on success
    success: bool = False
    error: RosterError | None = None
