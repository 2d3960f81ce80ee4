"""
Notify component unit tests.

Covers the best-effort dispatch used by invite issuance and the direct
send operation.
"""

from __future__ import annotations

import pytest

from src.adapters.dev_email import DevEmailAdapter
from src.components.notify import (
    NotifyConfig,
    SendInviteEmailInput,
    dispatch_invite_email,
    run,
    run_send,
)
from src.core.ports.email import EmailResult, EmailSendError
from src.domain.entities import Caller
from src.domain.errors import ErrorCode

# --- Mock Implementations ---


class RaisingEmail:
    """Email port that raises from send_email."""

    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    def send_email(
        self, recipient: str, subject: str, body_html: str, body_text: str | None = None
    ) -> EmailResult:
        raise self.exc


class QueuedEmail:
    """Email port that reports provider acceptance."""

    def __init__(self) -> None:
        self.subjects: list[str] = []

    def send_email(
        self, recipient: str, subject: str, body_html: str, body_text: str | None = None
    ) -> EmailResult:
        self.subjects.append(subject)
        return EmailResult.queued(recipient, "msg-1")


# --- Fixtures ---


@pytest.fixture
def config() -> NotifyConfig:
    return NotifyConfig(app_name="Roster", base_url="https://app.example.com/join")


@pytest.fixture
def email() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def caller() -> Caller:
    return Caller(uid="alice", email="alice@example.com")


# --- Dispatch Tests ---


class TestDispatchInviteEmail:
    def test_sends_link_with_token(self, email: DevEmailAdapter, config: NotifyConfig) -> None:
        assert dispatch_invite_email(email, config, "bob@x.com", "abc123", role="view") is True

        sent = email.get_last_email()
        assert sent.recipient == "bob@x.com"
        assert sent.subject == "You've been invited to Roster"
        assert "https://app.example.com/join?invite=abc123" in sent.body_html
        assert "https://app.example.com/join?invite=abc123" in sent.body_text

    def test_unconfigured_returns_false(self, config: NotifyConfig) -> None:
        assert dispatch_invite_email(None, config, "bob@x.com", "abc123") is False

    def test_rejected_returns_false(self, config: NotifyConfig) -> None:
        failing = DevEmailAdapter(fail_with="bad recipient")
        assert dispatch_invite_email(failing, config, "bob@x.com", "abc123") is False

    @pytest.mark.parametrize(
        "exc", [EmailSendError("bob@x.com", "timeout"), RuntimeError("boom")]
    )
    def test_exceptions_swallowed(self, config: NotifyConfig, exc: Exception) -> None:
        assert dispatch_invite_email(RaisingEmail(exc), config, "bob@x.com", "abc123") is False

    def test_custom_subject_template(self) -> None:
        queued = QueuedEmail()
        config = NotifyConfig(
            app_name="Roster", base_url="https://x", subject_template="Join {{app_name}} now"
        )

        assert dispatch_invite_email(queued, config, "bob@x.com", "t") is True
        assert queued.subjects == ["Join Roster now"]


# --- Direct Send Tests ---


class TestSendInviteEmail:
    def test_send_success(
        self, email: DevEmailAdapter, config: NotifyConfig, caller: Caller
    ) -> None:
        out = run_send(
            SendInviteEmailInput(
                caller=caller, to="bob@x.com", invite_url="https://app/?invite=t", role="edit"
            ),
            email=email,
            config=config,
        )

        assert out.success is True
        assert out.status == "sent"
        assert out.to == "bob@x.com"
        sent = email.get_last_email()
        assert "https://app/?invite=t" in sent.body_html
        assert "edit" in sent.body_html

    def test_role_optional(self, email: DevEmailAdapter, config: NotifyConfig, caller: Caller) -> None:
        out = run_send(
            SendInviteEmailInput(caller=caller, to="bob@x.com", invite_url="https://app/?invite=t"),
            email=email,
            config=config,
        )
        assert out.success is True

    def test_unauthenticated(self, email: DevEmailAdapter, config: NotifyConfig) -> None:
        out = run_send(
            SendInviteEmailInput(caller=None, to="bob@x.com", invite_url="https://app"),
            email=email,
            config=config,
        )

        assert out.error.code == ErrorCode.UNAUTHENTICATED
        assert email.email_count == 0

    @pytest.mark.parametrize("to,url", [("", "https://app"), ("bob@x.com", "")])
    def test_missing_fields(
        self, email: DevEmailAdapter, config: NotifyConfig, caller: Caller, to: str, url: str
    ) -> None:
        out = run_send(
            SendInviteEmailInput(caller=caller, to=to, invite_url=url), email=email, config=config
        )
        assert out.error.code == ErrorCode.INVALID_ARGUMENT

    def test_invalid_role(self, email: DevEmailAdapter, config: NotifyConfig, caller: Caller) -> None:
        out = run_send(
            SendInviteEmailInput(caller=caller, to="bob@x.com", invite_url="https://app", role="boss"),
            email=email,
            config=config,
        )
        assert out.error.code == ErrorCode.INVALID_ARGUMENT

    def test_unconfigured_is_failed_precondition(self, config: NotifyConfig, caller: Caller) -> None:
        out = run_send(
            SendInviteEmailInput(caller=caller, to="bob@x.com", invite_url="https://app"),
            email=None,
            config=config,
        )

        assert out.error.code == ErrorCode.FAILED_PRECONDITION
        assert out.error.message == "Email sending is not configured."

    def test_transport_error_is_internal(self, config: NotifyConfig, caller: Caller) -> None:
        out = run_send(
            SendInviteEmailInput(caller=caller, to="bob@x.com", invite_url="https://app"),
            email=RaisingEmail(EmailSendError("bob@x.com", "timeout")),
            config=config,
        )

        assert out.error.code == ErrorCode.INTERNAL
        assert "timeout" in out.error.message

    def test_rejected_send_is_internal(self, config: NotifyConfig, caller: Caller) -> None:
        out = run_send(
            SendInviteEmailInput(caller=caller, to="bob@x.com", invite_url="https://app"),
            email=DevEmailAdapter(fail_with="quota exceeded"),
            config=config,
        )

        assert out.error.code == ErrorCode.INTERNAL
        assert "quota exceeded" in out.error.message

    def test_run_dispatches(self, email: DevEmailAdapter, config: NotifyConfig, caller: Caller) -> None:
        out = run(
            SendInviteEmailInput(caller=caller, to="bob@x.com", invite_url="https://app"),
            email=email,
            config=config,
        )
        assert out.status == "sent"
