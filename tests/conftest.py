import os
from datetime import UTC, datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.adapters.dev_email import DevEmailAdapter
from src.adapters.sqlite.accounts import SQLiteAccountDirectory
from src.adapters.sqlite.migrator import DEFAULT_MIGRATIONS_DIR, SQLiteMigrator
from src.adapters.sqlite.store import SQLiteMembershipStore
from src.api.auth_utils import create_caller_token
from src.api.deps import Settings, get_email, get_settings
from src.api.main import app
from src.core.ports.store import WriteBatch
from src.core.services.roster import MembershipChange, apply_membership_change
from src.domain.entities import Account
from src.rules.loader import load_rules
from src.rules.models import Rules

ROOT = Path(__file__).resolve().parents[1]
RULES_PATH = ROOT / "rules.yaml"


@pytest.fixture
def test_data_dir(tmp_path):
    return str(tmp_path)


@pytest.fixture
def db_path(test_data_dir):
    """A freshly migrated SQLite database."""
    path = os.path.join(test_data_dir, "roster.db")
    SQLiteMigrator(path, DEFAULT_MIGRATIONS_DIR).run_migrations()
    return path


@pytest.fixture
def rules() -> Rules:
    return load_rules(RULES_PATH)


@pytest.fixture
def store(db_path) -> SQLiteMembershipStore:
    return SQLiteMembershipStore(db_path)


@pytest.fixture
def accounts(db_path) -> SQLiteAccountDirectory:
    return SQLiteAccountDirectory(db_path)


@pytest.fixture
def dev_email() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def make_admin(accounts, store):
    """Create an account and make it admin of a company."""

    def _make(email: str, company_id: str = "acme", password: str = "pw-123456") -> Account:
        account = accounts.create_account(email, password)
        store.commit(
            apply_membership_change(
                WriteBatch(),
                MembershipChange.join(
                    company_id, account.uid, account.email, "admin", datetime.now(UTC)
                ),
            )
        )
        return account

    return _make


@pytest.fixture
def client(test_data_dir, db_path, dev_email):
    """
    TestClient wired to the temporary database and the dev email adapter.

    Lifespan is not run; db_path is already migrated.
    """

    def _settings():
        s = Settings()
        s.data_dir = Path(test_data_dir)
        s.db_path = db_path
        s.rules_path = RULES_PATH
        s.sendgrid_api_key = None
        s.app_url = "https://roster.example.com"
        return s

    app.dependency_overrides[get_settings] = _settings
    app.dependency_overrides[get_email] = lambda: dev_email
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Bearer header for an account."""

    def _headers(account: Account) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_caller_token(account.uid, account.email)}"}

    return _headers
