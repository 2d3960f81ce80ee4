import sqlite3
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from src.adapters.auth.crypto import Argon2AuthAdapter
from src.adapters.sqlite.store import dict_factory
from src.domain.entities import Account


class AccountExistsError(ValueError):
    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"An account already exists for {email}")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _account_from_row(row: dict[str, Any]) -> Account:
    return Account(
        uid=row["uid"],
        email=row["email"],
        password_hash=row["password_hash"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class SQLiteAccountDirectory:
    """
    Self-hosted identity provider backed by the `accounts` table.

    Implements IdentityPort (email -> uid) and the password login used by
    the /api/auth routes. Emails are matched case-insensitively.
    """

    def __init__(self, db_path: str, hasher: Argon2AuthAdapter | None = None):
        self.db_path = db_path
        self.hasher = hasher or Argon2AuthAdapter()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        return conn

    def get_uid_by_email(self, email: str) -> str | None:
        account = self.get_by_email(email)
        return account.uid if account else None

    def get_by_email(self, email: str) -> Account | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM accounts WHERE email_normalized = ?", (normalize_email(email),)
            ).fetchone()
            return _account_from_row(row) if row else None
        finally:
            conn.close()

    def get_by_uid(self, uid: str) -> Account | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM accounts WHERE uid = ?", (uid,)).fetchone()
            return _account_from_row(row) if row else None
        finally:
            conn.close()

    def create_account(self, email: str, password: str, uid: str | None = None) -> Account:
        account = Account(
            uid=uid or uuid4().hex,
            email=email.strip(),
            password_hash=self.hasher.hash_password(password),
            created_at=datetime.now(UTC),
        )
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO accounts (uid, email, email_normalized, password_hash, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    account.uid,
                    account.email,
                    normalize_email(account.email),
                    account.password_hash,
                    account.created_at.isoformat(),
                ),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise AccountExistsError(account.email) from e
        finally:
            conn.close()
        return account

    def authenticate(self, email: str, password: str) -> Account | None:
        account = self.get_by_email(email)
        if account is None:
            return None
        if not self.hasher.verify_password(password, account.password_hash):
            return None
        return account
