import pytest

from eventflow.models import UserRole
from eventflow.models.audit import AuditLog


@pytest.mark.anyio("asyncio")
async def test_admin_creates_venue(client, api_user, db_session):
    _, admin = api_user(UserRole.ADMIN, department=None)
    resp = await client.post("/venues", json={"name": "  Seminar Hall  ", "capacity": 120}, headers=admin)
    assert resp.status_code == 201, resp.text
    assert resp.json()["name"] == "Seminar Hall"
    assert resp.json()["is_active"] is True

    db_session.expire_all()
    audit = (
        db_session.query(AuditLog)
        .filter(AuditLog.action == "CREATE_VENUE")
        .order_by(AuditLog.id.desc())
        .first()
    )
    assert audit is not None
    assert audit.actor.startswith("user:")


@pytest.mark.anyio("asyncio")
async def test_duplicate_venue_name(client, api_user, venue):
    _, admin = api_user(UserRole.ADMIN, department=None)
    resp = await client.post("/venues", json={"name": venue.name}, headers=admin)
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "ALREADY_EXISTS"


@pytest.mark.anyio("asyncio")
async def test_only_admins_create_venues(client, api_user):
    _, coordinator = api_user(UserRole.COORDINATOR)
    resp = await client.post("/venues", json={"name": "Rooftop"}, headers=coordinator)
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "INSUFFICIENT_ROLE"


@pytest.mark.anyio("asyncio")
async def test_list_and_get_venues(client, api_user, make_venue):
    _, headers = api_user(UserRole.HOD)
    open_hall = make_venue("Open Hall")
    make_venue("Closed Hall", is_active=False)

    active = await client.get("/venues", params={"active_only": "true"}, headers=headers)
    assert [v["name"] for v in active.json()] == ["Open Hall"]
    everything = await client.get("/venues", headers=headers)
    assert len(everything.json()) == 2

    single = await client.get(f"/venues/{open_hall.id}", headers=headers)
    assert single.json()["id"] == open_hall.id
    assert (await client.get("/venues/9999", headers=headers)).status_code == 404


@pytest.mark.anyio("asyncio")
async def test_availability_preview(client, api_user, submit_event, coordinator, venue):
    _, headers = api_user(UserRole.COORDINATOR)
    booked = submit_event(coordinator, venue_id=venue.id)

    clash = await client.get(
        f"/venues/{venue.id}/availability",
        params={"start_date": "2030-03-10", "start_time": "11:00", "end_time": "13:00"},
        headers=headers,
    )
    assert clash.status_code == 200
    assert clash.json()["available"] is False
    assert [c["id"] for c in clash.json()["conflicts"]] == [booked.id]

    free = await client.get(
        f"/venues/{venue.id}/availability",
        params={"start_date": "2030-03-10", "start_time": "12:00", "end_time": "13:00"},
        headers=headers,
    )
    assert free.json() == {"venue_id": venue.id, "available": True, "conflicts": []}


@pytest.mark.anyio("asyncio")
async def test_availability_rejects_inverted_window(client, api_user, venue):
    _, headers = api_user(UserRole.COORDINATOR)
    resp = await client.get(
        f"/venues/{venue.id}/availability",
        params={"start_date": "2030-03-10", "start_time": "13:00", "end_time": "11:00"},
        headers=headers,
    )
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "INVALID_WINDOW"


@pytest.mark.anyio("asyncio")
async def test_admin_updates_venue(client, api_user, db_session, venue):
    _, admin = api_user(UserRole.ADMIN, department=None)
    resp = await client.patch(
        f"/venues/{venue.id}",
        json={"name": " Grand Auditorium ", "capacity": 450},
        headers=admin,
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["name"] == "Grand Auditorium"
    assert body["capacity"] == 450
    assert body["location"] == "Main campus"
    assert body["is_active"] is True

    db_session.expire_all()
    audit = (
        db_session.query(AuditLog)
        .filter(AuditLog.action == "UPDATE_VENUE")
        .order_by(AuditLog.id.desc())
        .first()
    )
    assert audit is not None
    assert audit.entity_id == venue.id
    assert audit.data_json == {"name": "Grand Auditorium", "capacity": 450}


@pytest.mark.anyio("asyncio")
async def test_update_venue_rejects_taken_name_and_null_fields(client, api_user, make_venue, venue):
    _, admin = api_user(UserRole.ADMIN, department=None)
    other = make_venue("Seminar Room")

    taken = await client.patch(f"/venues/{other.id}", json={"name": venue.name}, headers=admin)
    assert taken.status_code == 409
    assert taken.json()["error"]["code"] == "ALREADY_EXISTS"

    nulled = await client.patch(f"/venues/{other.id}", json={"is_active": None}, headers=admin)
    assert nulled.status_code == 422
    assert (await client.patch("/venues/9999", json={"capacity": 10}, headers=admin)).status_code == 404


@pytest.mark.anyio("asyncio")
async def test_only_admins_update_venues(client, api_user, venue):
    _, hod = api_user(UserRole.HOD)
    resp = await client.patch(f"/venues/{venue.id}", json={"is_active": False}, headers=hod)
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "INSUFFICIENT_ROLE"


@pytest.mark.anyio("asyncio")
async def test_deactivated_venue_refuses_new_bookings(client, api_user, event_data, venue):
    _, admin = api_user(UserRole.ADMIN, department=None)
    _, coordinator = api_user(UserRole.COORDINATOR)

    resp = await client.patch(f"/venues/{venue.id}", json={"is_active": False}, headers=admin)
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False

    booking = await client.post("/events", json=event_data(venue_id=venue.id), headers=coordinator)
    assert booking.status_code == 409
    assert booking.json()["error"]["code"] == "VENUE_UNAVAILABLE"

    listed = await client.get("/venues", params={"active_only": "true"}, headers=coordinator)
    assert venue.id not in [v["id"] for v in listed.json()]

    await client.patch(f"/venues/{venue.id}", json={"is_active": True}, headers=admin)
    reopened = await client.post("/events", json=event_data(venue_id=venue.id), headers=coordinator)
    assert reopened.status_code == 201, reopened.text
