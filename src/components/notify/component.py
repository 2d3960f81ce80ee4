"""
Notify component - invitation email delivery.

Two entry points with different failure contracts:
- dispatch_invite_email: best-effort side effect of invite issuance.
  Never raises; the outcome is only logged and reported as a bool.
- run_send: the direct-send operation. Sending is its whole purpose, so a
  missing email configuration is FAILED_PRECONDITION and a rejected or
  crashed send is INTERNAL.
"""

from __future__ import annotations

import logging

from src.core.ports.email import EmailError
from src.core.services.invite_email import build_invite_url, render_invite_email
from src.domain.errors import ErrorCode, RosterError
from src.domain.policy import validate_role

from .models import NotifyConfig, SendInviteEmailInput, SendInviteEmailOutput
from .ports import EmailSenderPort

logger = logging.getLogger(__name__)


def dispatch_invite_email(
    email: EmailSenderPort | None,
    config: NotifyConfig,
    to: str,
    token: str,
    role: str | None = None,
) -> bool:
    """
    Send the invite email for a freshly issued token.

    Returns:
        True if the provider accepted (or the dev adapter logged) the email
    """
    if email is None:
        logger.warning("Email sending not configured; invite created for %s but not emailed", to)
        return False

    rendered = render_invite_email(
        build_invite_url(config.base_url, token),
        config.app_name,
        role=role,
        subject_template=config.subject_template,
    )
    try:
        result = email.send_email(to, rendered.subject, rendered.body_html, rendered.body_text)
    except Exception:
        # The pending invite is already committed; delivery is best effort
        logger.exception("Invite email to %s failed", to)
        return False

    if not result.accepted:
        logger.error("Invite email to %s rejected: %s", to, result.error)
        return False

    logger.info("Invite email to %s dispatched (%s)", to, result.status.value)
    return True


def run_send(
    inp: SendInviteEmailInput,
    *,
    email: EmailSenderPort | None,
    config: NotifyConfig,
) -> SendInviteEmailOutput:
    if inp.caller is None:
        return SendInviteEmailOutput(error=RosterError.unauthenticated())

    if not inp.to or not inp.invite_url:
        return SendInviteEmailOutput(error=RosterError.invalid("to and inviteUrl are required."))

    if inp.role is not None and not validate_role(inp.role):
        return SendInviteEmailOutput(error=RosterError.invalid_role())

    if email is None:
        return SendInviteEmailOutput(
            error=RosterError(ErrorCode.FAILED_PRECONDITION, "Email sending is not configured.")
        )

    rendered = render_invite_email(
        inp.invite_url,
        config.app_name,
        role=inp.role,
        subject_template=config.subject_template,
    )
    try:
        result = email.send_email(inp.to, rendered.subject, rendered.body_html, rendered.body_text)
    except EmailError as e:
        logger.error("Direct invite email to %s failed: %s", inp.to, e)
        return SendInviteEmailOutput(
            error=RosterError(ErrorCode.INTERNAL, f"Failed to send invite email: {e}")
        )

    if not result.accepted:
        return SendInviteEmailOutput(
            error=RosterError(ErrorCode.INTERNAL, f"Failed to send invite email: {result.error}")
        )

    logger.info("Invite email sent to %s by %s", inp.to, inp.caller.uid)
    return SendInviteEmailOutput(to=inp.to, status="sent", success=True)


def run(
    inp: SendInviteEmailInput,
    *,
    email: EmailSenderPort | None,
    config: NotifyConfig,
) -> SendInviteEmailOutput:
    if isinstance(inp, SendInviteEmailInput):
        return run_send(inp, email=email, config=config)

    raise ValueError(f"Unknown input type: {type(inp)}")
