import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from src.adapters.clock import SystemClock
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.sendgrid_email import SendGridEmailAdapter
from src.adapters.sqlite.accounts import SQLiteAccountDirectory
from src.adapters.sqlite.store import SQLiteMembershipStore
from src.api.auth_utils import caller_from_token
from src.components.invite import InviteSettings
from src.components.notify import EmailSenderPort, NotifyConfig
from src.core.ports.email import EmailAddress
from src.domain.entities import Caller
from src.rules.loader import load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("ROSTER_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "roster.db")
        self.rules_path = self.base_dir / "rules.yaml"
        self.sendgrid_api_key = os.environ.get("ROSTER_SENDGRID_API_KEY") or None
        self.app_url = os.environ.get("ROSTER_APP_URL") or None


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return _load_rules_cached(settings.rules_path)


@lru_cache
def _load_rules_cached(path: Path) -> Rules:
    return load_rules(path)


# --- Repos / Adapters ---
def get_store(settings: Settings = Depends(get_settings)) -> SQLiteMembershipStore:
    return SQLiteMembershipStore(settings.db_path)


def get_accounts(settings: Settings = Depends(get_settings)) -> SQLiteAccountDirectory:
    return SQLiteAccountDirectory(settings.db_path)


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# Adapters are shared across requests: SendGrid keeps one connection pool,
# the dev logger keeps what it logged. close_email_adapters runs on shutdown.
_sendgrid_instance: SendGridEmailAdapter | None = None
_dev_email_instance: DevEmailAdapter | None = None


def get_provider_email(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> EmailSenderPort | None:
    """
    SendGrid adapter when ROSTER_SENDGRID_API_KEY is set, else None.

    The direct-send route depends on this alone, so a missing key is
    reported to the caller instead of being logged away.
    """
    global _sendgrid_instance
    if not settings.sendgrid_api_key:
        return None
    if _sendgrid_instance is None:
        _sendgrid_instance = SendGridEmailAdapter(
            settings.sendgrid_api_key,
            EmailAddress(rules.email.sender_email, rules.email.sender_name),
            timeout=rules.email.timeout_seconds,
        )
    return _sendgrid_instance


def get_email(
    provider: EmailSenderPort | None = Depends(get_provider_email),
    rules: Rules = Depends(get_rules),
) -> EmailSenderPort | None:
    """Adapter for invite issuance: the provider, else the dev logger if rules allow it."""
    global _dev_email_instance
    if provider is not None:
        return provider
    if rules.email.dev_fallback:
        if _dev_email_instance is None:
            _dev_email_instance = DevEmailAdapter()
        return _dev_email_instance
    return None


def close_email_adapters() -> None:
    global _sendgrid_instance
    if _sendgrid_instance is not None:
        _sendgrid_instance.close()
        _sendgrid_instance = None


def get_notify_config(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> NotifyConfig:
    return NotifyConfig.from_rules(rules, base_url=settings.app_url)


def get_invite_settings(rules: Rules = Depends(get_rules)) -> InviteSettings:
    return InviteSettings.from_rules(rules)


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_caller(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> Caller | None:
    """
    Authenticated caller, or None.

    Components turn a None caller into UNAUTHENTICATED, so routes never
    short-circuit here.
    """
    # Authorization header first, then HttpOnly cookie
    if not token:
        cookie_token = request.cookies.get("access_token")
        if cookie_token and cookie_token.startswith("Bearer "):
            token = cookie_token.split(" ", 1)[1]

    if not token:
        return None
    return caller_from_token(token)
