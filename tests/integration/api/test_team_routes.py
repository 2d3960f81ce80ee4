"""Integration tests for team API routes."""

from src.api.deps import get_email, get_provider_email
from src.api.main import app


def _profile(client, headers):
    resp = client.get("/api/team/profile", headers=headers)
    assert resp.status_code == 200
    return resp.json()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_invite_requires_auth(client):
    resp = client.post(
        "/api/team/invites", json={"email": "bob@x.com", "role": "edit", "companyId": "acme"}
    )
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "unauthenticated"


def test_invalid_token_is_unauthenticated(client):
    resp = client.post(
        "/api/team/invites",
        json={"email": "bob@x.com", "role": "edit", "companyId": "acme"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert resp.status_code == 401


def test_missing_fields(client, make_admin, auth_headers):
    admin = make_admin("alice@example.com")

    resp = client.post("/api/team/invites", json={}, headers=auth_headers(admin))

    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "invalid_argument"


def test_invalid_role(client, make_admin, auth_headers):
    admin = make_admin("alice@example.com")

    resp = client.post(
        "/api/team/invites",
        json={"email": "bob@x.com", "role": "owner", "companyId": "acme"},
        headers=auth_headers(admin),
    )

    assert resp.status_code == 400
    assert resp.json()["detail"]["field"] == "role"


def test_invite_accept_scenario(client, make_admin, accounts, store, dev_email, auth_headers):
    admin = make_admin("alice@example.com")

    # 1. Admin invites an unknown email
    resp = client.post(
        "/api/team/invites",
        json={"email": "bob@x.com", "role": "edit", "companyId": "acme"},
        headers=auth_headers(admin),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "invited"
    assert body["email"] == "bob@x.com"
    assert body["emailSent"] is True
    token = body["token"]
    assert f"https://roster.example.com?invite={token}" in dev_email.get_last_email().body_html

    # 2. Bob registers and accepts
    resp = client.post("/api/auth/register", json={"email": "bob@x.com", "password": "secret-1"})
    assert resp.status_code == 201
    bob_headers = {"Authorization": f"Bearer {resp.json()['access_token']}"}

    resp = client.post("/api/team/invites/accept", json={"token": token}, headers=bob_headers)
    assert resp.status_code == 200
    assert resp.json() == {"status": "accepted", "companyId": "acme", "role": "edit"}

    # 3. State mirrors
    assert store.find_invite_by_token(token) is None
    bob = accounts.get_by_email("bob@x.com")
    assert store.get_member("acme", bob.uid).role == "edit"
    profile = _profile(client, bob_headers)
    assert profile == {"uid": bob.uid, "companyId": "acme", "role": "edit"}

    # 4. Token is single-use
    resp = client.post("/api/team/invites/accept", json={"token": token}, headers=bob_headers)
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "not_found"


def test_invite_existing_account_added(client, make_admin, accounts, store, auth_headers):
    admin = make_admin("alice@example.com")
    carol = accounts.create_account("carol@example.com", "pw-carol")

    resp = client.post(
        "/api/team/invites",
        json={"email": "carol@example.com", "role": "view", "companyId": "acme"},
        headers=auth_headers(admin),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body == {"status": "added", "email": "carol@example.com"}
    assert store.get_member("acme", carol.uid).role == "view"
    assert _profile(client, auth_headers(carol))["companyId"] == "acme"


def test_accept_with_wrong_email_forbidden(client, make_admin, accounts, auth_headers):
    admin = make_admin("alice@example.com")
    resp = client.post(
        "/api/team/invites",
        json={"email": "bob@x.com", "role": "edit", "companyId": "acme"},
        headers=auth_headers(admin),
    )
    token = resp.json()["token"]
    mallory = accounts.create_account("mallory@x.com", "pw-mallory")

    resp = client.post(
        "/api/team/invites/accept", json={"token": token}, headers=auth_headers(mallory)
    )

    assert resp.status_code == 403
    assert "bob@x.com" in resp.json()["detail"]["message"]


def test_non_admin_cannot_invite(client, make_admin, accounts, store, auth_headers):
    make_admin("alice@example.com")
    viewer = accounts.create_account("vic@example.com", "pw-vic")

    resp = client.post(
        "/api/team/invites",
        json={"email": "bob@x.com", "role": "edit", "companyId": "acme"},
        headers=auth_headers(viewer),
    )

    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "permission_denied"


def test_update_role_and_remove(client, make_admin, accounts, store, auth_headers):
    admin = make_admin("alice@example.com")
    carol = accounts.create_account("carol@example.com", "pw-carol")
    client.post(
        "/api/team/invites",
        json={"email": "carol@example.com", "role": "view", "companyId": "acme"},
        headers=auth_headers(admin),
    )

    resp = client.post(
        "/api/team/members/role",
        json={"targetUid": carol.uid, "role": "admin", "companyId": "acme"},
        headers=auth_headers(admin),
    )
    assert resp.status_code == 200
    assert resp.json() == {"status": "updated", "targetUid": carol.uid, "role": "admin"}
    assert _profile(client, auth_headers(carol))["role"] == "admin"

    resp = client.post(
        "/api/team/members/remove",
        json={"targetUid": carol.uid, "companyId": "acme"},
        headers=auth_headers(admin),
    )
    assert resp.status_code == 200
    assert resp.json() == {"status": "removed", "targetUid": carol.uid}
    assert store.get_member("acme", carol.uid) is None
    assert _profile(client, auth_headers(carol)) == {
        "uid": carol.uid,
        "companyId": None,
        "role": None,
    }


def test_self_actions_rejected(client, make_admin, auth_headers):
    admin = make_admin("alice@example.com")

    resp = client.post(
        "/api/team/members/remove",
        json={"targetUid": admin.uid, "companyId": "acme"},
        headers=auth_headers(admin),
    )
    assert resp.status_code == 400

    resp = client.post(
        "/api/team/members/role",
        json={"targetUid": admin.uid, "role": "view", "companyId": "acme"},
        headers=auth_headers(admin),
    )
    assert resp.status_code == 400
    assert _profile(client, auth_headers(admin))["role"] == "admin"


def test_remove_unknown_member_not_found(client, make_admin, auth_headers):
    admin = make_admin("alice@example.com")

    resp = client.post(
        "/api/team/members/remove",
        json={"targetUid": "ghost", "companyId": "acme"},
        headers=auth_headers(admin),
    )

    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "not_found"


def test_send_invite_email(client, make_admin, dev_email, auth_headers):
    admin = make_admin("alice@example.com")
    app.dependency_overrides[get_provider_email] = lambda: dev_email

    resp = client.post(
        "/api/team/invites/email",
        json={"to": "bob@x.com", "inviteUrl": "https://roster.example.com?invite=abc", "role": "view"},
        headers=auth_headers(admin),
    )

    assert resp.status_code == 200
    assert resp.json() == {"status": "sent", "to": "bob@x.com"}
    assert dev_email.get_last_email().recipient == "bob@x.com"


def test_send_invite_email_without_api_key(client, make_admin, dev_email, auth_headers):
    # Real provider dependency: no key configured, dev fallback on in rules.yaml
    admin = make_admin("alice@example.com")

    resp = client.post(
        "/api/team/invites/email",
        json={"to": "bob@x.com", "inviteUrl": "https://roster.example.com?invite=abc"},
        headers=auth_headers(admin),
    )

    assert resp.status_code == 412
    assert resp.json()["detail"]["code"] == "failed_precondition"
    assert dev_email.email_count == 0


def test_invite_without_email_still_created(client, make_admin, store, auth_headers):
    admin = make_admin("alice@example.com")
    app.dependency_overrides[get_email] = lambda: None

    resp = client.post(
        "/api/team/invites",
        json={"email": "bob@x.com", "role": "view", "companyId": "acme"},
        headers=auth_headers(admin),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "invited"
    assert body["emailSent"] is False
    assert store.find_invite_by_token(body["token"]) is not None


def test_profile_requires_auth(client):
    assert client.get("/api/team/profile").status_code == 401
