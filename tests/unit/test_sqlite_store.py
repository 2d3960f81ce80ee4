"""Unit tests for SQLiteMembershipStore against a migrated temp database."""

import sqlite3
from datetime import UTC, datetime

import pytest

from src.adapters.sqlite.store import SQLiteMembershipStore
from src.core.ports.store import DuplicateRecordError, RecordNotFoundError, WriteBatch
from src.domain.entities import Member, PendingInvite

AT = datetime(2024, 6, 15, 9, 30, tzinfo=UTC)


def _member(uid: str, role: str = "view") -> Member:
    return Member(company_id="acme", uid=uid, email=f"{uid}@x.com", role=role, added_at=AT)


def _invite(token: str, company_id: str = "acme") -> PendingInvite:
    return PendingInvite(
        token=token,
        company_id=company_id,
        email="Bob@X.com",
        role="edit",
        invited_by="alice",
        invited_at=AT,
    )


def _count(db_path: str, table: str) -> int:
    conn = sqlite3.connect(db_path)
    try:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    finally:
        conn.close()


def test_member_round_trip(store: SQLiteMembershipStore) -> None:
    store.commit(WriteBatch().set_member(_member("bob", "edit")))

    member = store.get_member("acme", "bob")
    assert member == _member("bob", "edit")
    assert store.get_member("globex", "bob") is None


def test_set_member_overwrites(store: SQLiteMembershipStore) -> None:
    store.commit(WriteBatch().set_member(_member("bob", "view")))
    store.commit(WriteBatch().set_member(_member("bob", "admin")))

    assert store.get_member("acme", "bob").role == "admin"
    assert len(store.list_members("acme")) == 1


def test_invite_lookup(store: SQLiteMembershipStore) -> None:
    store.commit(WriteBatch().create_invite(_invite("t1")))

    found = store.find_invite_by_token("t1")
    assert found == _invite("t1")
    assert store.get_invite("acme", "t1") == found
    assert store.get_invite("globex", "t1") is None


def test_duplicate_token(store: SQLiteMembershipStore) -> None:
    store.commit(WriteBatch().create_invite(_invite("t1")))

    with pytest.raises(DuplicateRecordError):
        store.commit(WriteBatch().create_invite(_invite("t1", "globex")))


def test_rollback_on_missing_invite(store: SQLiteMembershipStore, db_path: str) -> None:
    batch = (
        WriteBatch()
        .set_member(_member("bob", "edit"))
        .merge_profile("bob", company_id="acme", role="edit")
        .delete_invite("acme", "missing")
    )

    with pytest.raises(RecordNotFoundError):
        store.commit(batch)

    assert _count(db_path, "members") == 0
    assert _count(db_path, "user_profiles") == 0


def test_rollback_on_duplicate_token(store: SQLiteMembershipStore, db_path: str) -> None:
    store.commit(WriteBatch().create_invite(_invite("t1")))

    with pytest.raises(DuplicateRecordError):
        store.commit(WriteBatch().set_member(_member("bob")).create_invite(_invite("t1")))

    assert _count(db_path, "members") == 0


def test_must_exist_update_and_delete(store: SQLiteMembershipStore) -> None:
    with pytest.raises(RecordNotFoundError):
        store.commit(WriteBatch().update_member_role("acme", "ghost", "edit"))
    with pytest.raises(RecordNotFoundError):
        store.commit(WriteBatch().delete_member("acme", "ghost"))

    store.commit(WriteBatch().delete_member("acme", "ghost", must_exist=False))


def test_merge_profile(store: SQLiteMembershipStore) -> None:
    store.commit(WriteBatch().merge_profile("bob", company_id="acme", role="view"))
    store.commit(WriteBatch().merge_profile("bob", role="admin"))

    profile = store.get_profile("bob")
    assert profile.company_id == "acme"
    assert profile.role == "admin"

    store.commit(WriteBatch().merge_profile("bob", company_id=None, role=None))
    profile = store.get_profile("bob")
    assert profile.company_id is None
    assert profile.role is None


def test_delete_invite(store: SQLiteMembershipStore) -> None:
    store.commit(WriteBatch().create_invite(_invite("t1")))

    store.commit(WriteBatch().delete_invite("acme", "t1"))

    assert store.find_invite_by_token("t1") is None
    with pytest.raises(RecordNotFoundError):
        store.commit(WriteBatch().delete_invite("acme", "t1"))
