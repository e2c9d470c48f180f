from uuid import uuid4

import pytest

from eventflow.models import UserRole
from eventflow.models.audit import AuditLog


@pytest.mark.anyio("asyncio")
async def test_user_creation_is_audited(client, api_user, db_session):
    _, admin = api_user(UserRole.ADMIN, department=None)
    payload = {
        "username": f"hod-{uuid4().hex[:6]}",
        "email": f"hod-{uuid4().hex[:6]}@example.edu",
        "role": "hod",
        "department": "Physics",
    }
    resp = await client.post("/users", json=payload, headers=admin)
    assert resp.status_code == 201, resp.text
    assert resp.json()["role"] == "hod"

    db_session.expire_all()
    audit = (
        db_session.query(AuditLog)
        .filter(AuditLog.action == "CREATE_USER")
        .order_by(AuditLog.id.desc())
        .first()
    )
    assert audit is not None
    assert audit.data_json["email"] == "***@example.edu"


@pytest.mark.anyio("asyncio")
async def test_duplicate_username(client, api_user):
    existing, admin = api_user(UserRole.ADMIN, department=None)
    payload = {"username": existing.username, "email": "other@example.edu", "role": "dean"}
    resp = await client.post("/users", json=payload, headers=admin)
    assert resp.status_code == 409


@pytest.mark.anyio("asyncio")
async def test_get_user_requires_admin(client, api_user):
    target, coordinator = api_user(UserRole.COORDINATOR)
    _, admin = api_user(UserRole.ADMIN, department=None)

    assert (await client.get(f"/users/{target.id}", headers=coordinator)).status_code == 403
    resp = await client.get(f"/users/{target.id}", headers=admin)
    assert resp.status_code == 200
    assert resp.json()["username"] == target.username

    me = await client.get("/users/me", headers=coordinator)
    assert me.json()["id"] == target.id


@pytest.mark.anyio("asyncio")
async def test_inactive_user_is_refused(client, api_user):
    _, headers = api_user(UserRole.HOD, is_active=False)
    resp = await client.get("/users/me", headers=headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "USER_INACTIVE"


@pytest.mark.anyio("asyncio")
async def test_api_key_lifecycle(client, api_user):
    _, admin = api_user(UserRole.ADMIN, department=None)
    owner, _ = api_user(UserRole.DEAN, department=None)

    created = await client.post(
        "/apikeys", json={"name": "dean-laptop", "user_id": owner.id}, headers=admin
    )
    assert created.status_code == 201, created.text
    raw = created.json()["key"]
    assert raw.startswith("evf_")

    key_headers = {"X-API-Key": raw}
    me = await client.get("/users/me", headers=key_headers)
    assert me.json()["id"] == owner.id

    detail = await client.get(f"/apikeys/{created.json()['id']}", headers=admin)
    assert "key" not in detail.json()
    assert detail.json()["last_used_at"] is not None

    revoked = await client.delete(f"/apikeys/{created.json()['id']}", headers=admin)
    assert revoked.status_code == 204
    denied = await client.get("/users/me", headers=key_headers)
    assert denied.status_code == 401
    assert denied.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.anyio("asyncio")
async def test_api_key_for_unknown_user(client, api_user):
    _, admin = api_user(UserRole.ADMIN, department=None)
    resp = await client.post("/apikeys", json={"name": "ghost", "user_id": 9999}, headers=admin)
    assert resp.status_code == 404
