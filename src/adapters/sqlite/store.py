import sqlite3
from datetime import datetime
from typing import Any

from src.core.ports.store import (
    CreateInvite,
    DeleteInvite,
    DeleteMember,
    DuplicateRecordError,
    MergeProfile,
    RecordNotFoundError,
    SetMember,
    StoreError,
    UpdateMemberRole,
    WriteBatch,
)
from src.domain.entities import Member, PendingInvite, UserProfile


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _member_from_row(row: dict[str, Any]) -> Member:
    return Member(
        company_id=row["company_id"],
        uid=row["uid"],
        email=row["email"],
        role=row["role"],
        added_at=datetime.fromisoformat(row["added_at"]),
    )


def _invite_from_row(row: dict[str, Any]) -> PendingInvite:
    return PendingInvite(
        token=row["token"],
        company_id=row["company_id"],
        email=row["email"],
        role=row["role"],
        invited_at=datetime.fromisoformat(row["invited_at"]),
        invited_by=row["invited_by"],
    )


class SQLiteMembershipStore:
    """
    SQLite implementation of MembershipStorePort.

    Each commit runs inside one BEGIN IMMEDIATE transaction, so concurrent
    writers are serialized by SQLite's write lock and a failing op rolls
    back everything staged before it.
    """

    def __init__(self, db_path: str, timeout: float = 10.0):
        self.db_path = db_path
        self.timeout = timeout

    def _get_conn(self) -> sqlite3.Connection:
        # Autocommit mode: transactions are opened explicitly in commit()
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    # --- Reads ---

    def get_member(self, company_id: str, uid: str) -> Member | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM members WHERE company_id = ? AND uid = ?", (company_id, uid)
            ).fetchone()
            return _member_from_row(row) if row else None
        finally:
            conn.close()

    def get_profile(self, uid: str) -> UserProfile | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM user_profiles WHERE uid = ?", (uid,)).fetchone()
            if not row:
                return None
            return UserProfile(uid=row["uid"], company_id=row["company_id"], role=row["role"])
        finally:
            conn.close()

    def get_invite(self, company_id: str, token: str) -> PendingInvite | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM pending_invites WHERE company_id = ? AND token = ?",
                (company_id, token),
            ).fetchone()
            return _invite_from_row(row) if row else None
        finally:
            conn.close()

    def find_invite_by_token(self, token: str) -> PendingInvite | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM pending_invites WHERE token = ? LIMIT 1", (token,)
            ).fetchone()
            return _invite_from_row(row) if row else None
        finally:
            conn.close()

    def list_members(self, company_id: str) -> list[Member]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM members WHERE company_id = ? ORDER BY added_at ASC", (company_id,)
            ).fetchall()
            return [_member_from_row(r) for r in rows]
        finally:
            conn.close()

    # --- Writes ---

    def commit(self, batch: WriteBatch) -> None:
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                for op in batch.ops:
                    self._apply(conn, op)
            except sqlite3.IntegrityError as e:
                conn.execute("ROLLBACK")
                raise StoreError(f"Constraint violated: {e}") from e
            except Exception:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            raise StoreError(f"SQLite batch failed: {e}") from e
        finally:
            conn.close()

    def _apply(self, conn: sqlite3.Connection, op: object) -> None:
        if isinstance(op, SetMember):
            m = op.member
            conn.execute(
                """
                INSERT INTO members (company_id, uid, email, role, added_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(company_id, uid) DO UPDATE SET
                    email=excluded.email,
                    role=excluded.role,
                    added_at=excluded.added_at
                """,
                (m.company_id, m.uid, m.email, m.role, m.added_at.isoformat()),
            )

        elif isinstance(op, UpdateMemberRole):
            cur = conn.execute(
                "UPDATE members SET role = ? WHERE company_id = ? AND uid = ?",
                (op.role, op.company_id, op.uid),
            )
            if cur.rowcount == 0:
                raise RecordNotFoundError("member", f"{op.company_id}/{op.uid}")

        elif isinstance(op, DeleteMember):
            cur = conn.execute(
                "DELETE FROM members WHERE company_id = ? AND uid = ?", (op.company_id, op.uid)
            )
            if cur.rowcount == 0 and op.must_exist:
                raise RecordNotFoundError("member", f"{op.company_id}/{op.uid}")

        elif isinstance(op, MergeProfile):
            conn.execute("INSERT OR IGNORE INTO user_profiles (uid) VALUES (?)", (op.uid,))
            # Column names come from the PROFILE_FIELDS allowlist checked by MergeProfile
            for column, value in op.fields.items():
                conn.execute(
                    f"UPDATE user_profiles SET {column} = ? WHERE uid = ?", (value, op.uid)
                )

        elif isinstance(op, CreateInvite):
            i = op.invite
            try:
                conn.execute(
                    """
                    INSERT INTO pending_invites
                    (token, company_id, email, role, invited_at, invited_by)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        i.token,
                        i.company_id,
                        i.email,
                        i.role,
                        i.invited_at.isoformat(),
                        i.invited_by,
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise DuplicateRecordError("invite", i.token[:8]) from e

        elif isinstance(op, DeleteInvite):
            cur = conn.execute(
                "DELETE FROM pending_invites WHERE company_id = ? AND token = ?",
                (op.company_id, op.token),
            )
            if cur.rowcount == 0 and op.must_exist:
                raise RecordNotFoundError("invite", op.token[:8])

        else:
            raise ValueError(f"Unsupported batch op: {type(op).__name__}")
