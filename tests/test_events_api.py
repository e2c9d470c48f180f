import pytest

from eventflow.models import EventStatus, UserRole


@pytest.fixture
def people(api_user):
    return {role: api_user(role) for role in (UserRole.COORDINATOR, UserRole.HOD, UserRole.DEAN, UserRole.PRINCIPAL)}


@pytest.fixture
def headers_for(people):
    return lambda role: people[role][1]


async def _create(client, headers, body):
    resp = await client.post("/events", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.anyio("asyncio")
async def test_create_event(client, headers_for, event_data, venue):
    created = await _create(client, headers_for(UserRole.COORDINATOR), event_data(venue_id=venue.id))
    assert created["status"] == EventStatus.PENDING_HOD.value
    assert created["hod_approval_at"] is None
    assert created["version"] == 1


@pytest.mark.anyio("asyncio")
async def test_create_requires_api_key(client, event_data, venue):
    resp = await client.post("/events", json=event_data(venue_id=venue.id))
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "NO_API_KEY"


@pytest.mark.anyio("asyncio")
async def test_create_validates_payload(client, headers_for, event_data, venue):
    headers = headers_for(UserRole.COORDINATOR)
    both = event_data(venue_id=venue.id, other_venue="Lawn")
    backwards = event_data(venue_id=venue.id, start_time="12:00:00", end_time="10:00:00")
    assert (await client.post("/events", json=both, headers=headers)).status_code == 422
    assert (await client.post("/events", json=backwards, headers=headers)).status_code == 422


@pytest.mark.anyio("asyncio")
async def test_create_conflict_returns_409(client, headers_for, event_data, venue):
    headers = headers_for(UserRole.COORDINATOR)
    await _create(client, headers, event_data(venue_id=venue.id))
    resp = await client.post("/events", json=event_data(venue_id=venue.id), headers=headers)
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "VENUE_UNAVAILABLE"


@pytest.mark.anyio("asyncio")
async def test_approval_flow_over_http(client, headers_for, event_data, venue):
    created = await _create(client, headers_for(UserRole.COORDINATOR), event_data(venue_id=venue.id))
    url = f"/events/{created['id']}/transition"

    for role, expected in (
        (UserRole.HOD, EventStatus.PENDING_DEAN),
        (UserRole.DEAN, EventStatus.PENDING_PRINCIPAL),
        (UserRole.PRINCIPAL, EventStatus.APPROVED),
    ):
        resp = await client.post(url, json={"action": "approve"}, headers=headers_for(role))
        assert resp.status_code == 200, resp.text
        assert resp.json()["status"] == expected.value

    history = await client.get(f"/events/{created['id']}/history", headers=headers_for(UserRole.COORDINATOR))
    assert history.status_code == 200
    assert [entry["action"] for entry in history.json()] == ["create", "approve", "approve", "approve"]


@pytest.mark.anyio("asyncio")
async def test_transition_errors_map_to_status_codes(client, headers_for, event_data, venue):
    created = await _create(client, headers_for(UserRole.COORDINATOR), event_data(venue_id=venue.id))
    url = f"/events/{created['id']}/transition"

    wrong_role = await client.post(url, json={"action": "approve"}, headers=headers_for(UserRole.COORDINATOR))
    assert wrong_role.status_code == 403
    assert wrong_role.json()["error"]["code"] == "UNAUTHORIZED_ROLE"

    wrong_stage = await client.post(url, json={"action": "approve"}, headers=headers_for(UserRole.DEAN))
    assert wrong_stage.status_code == 409
    assert wrong_stage.json()["error"]["code"] == "INVALID_TRANSITION"

    no_remarks = await client.post(url, json={"action": "reject"}, headers=headers_for(UserRole.HOD))
    assert no_remarks.status_code == 422
    assert no_remarks.json()["error"]["code"] == "REMARKS_REQUIRED"

    not_review = await client.post(url, json={"action": "resubmit"}, headers=headers_for(UserRole.HOD))
    assert not_review.status_code == 422


@pytest.mark.anyio("asyncio")
async def test_unknown_event_is_404(client, headers_for):
    resp = await client.get("/events/9999", headers=headers_for(UserRole.HOD))
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.anyio("asyncio")
async def test_return_and_resubmit(client, headers_for, event_data, venue):
    coordinator = headers_for(UserRole.COORDINATOR)
    created = await _create(client, coordinator, event_data(venue_id=venue.id))

    returned = await client.post(
        f"/events/{created['id']}/transition",
        json={"action": "return", "remarks": "Please add a budget"},
        headers=headers_for(UserRole.HOD),
    )
    assert returned.json()["status"] == EventStatus.RETURNED_TO_COORDINATOR.value
    assert returned.json()["remarks"] == "Please add a budget"

    body = event_data(venue_id=venue.id, description="Budget attached", remarks="Budget added")
    resubmitted = await client.put(f"/events/{created['id']}/resubmit", json=body, headers=coordinator)
    assert resubmitted.status_code == 200, resubmitted.text
    assert resubmitted.json()["status"] == EventStatus.PENDING_HOD.value
    assert resubmitted.json()["description"] == "Budget attached"
    assert resubmitted.json()["remarks"] is None


@pytest.mark.anyio("asyncio")
async def test_revoke_and_cancel(client, headers_for, event_data, venue):
    coordinator = headers_for(UserRole.COORDINATOR)
    created = await _create(client, coordinator, event_data(venue_id=venue.id))
    await client.post(
        f"/events/{created['id']}/transition", json={"action": "approve"}, headers=headers_for(UserRole.HOD)
    )

    revoked = await client.post(f"/events/{created['id']}/revoke", headers=headers_for(UserRole.HOD))
    assert revoked.status_code == 200, revoked.text
    assert revoked.json()["status"] == EventStatus.PENDING_HOD.value
    assert revoked.json()["remarks"].startswith("Approval revoked by HOD")

    cancelled = await client.post(
        f"/events/{created['id']}/cancel", json={"reason": "Postponed"}, headers=coordinator
    )
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == EventStatus.CANCELLED.value

    again = await client.post(f"/events/{created['id']}/cancel", headers=coordinator)
    assert again.status_code == 409


@pytest.mark.anyio("asyncio")
async def test_review_queue_and_listing(client, headers_for, event_data, venue):
    coordinator = headers_for(UserRole.COORDINATOR)
    created = await _create(client, coordinator, event_data(venue_id=venue.id))

    queue = await client.get("/events/queue", headers=headers_for(UserRole.HOD))
    assert [event["id"] for event in queue.json()] == [created["id"]]
    assert (await client.get("/events/queue", headers=headers_for(UserRole.DEAN))).json() == []

    mine = await client.get("/events", params={"mine": "true"}, headers=coordinator)
    assert [event["id"] for event in mine.json()] == [created["id"]]
    filtered = await client.get("/events", params={"status": "approved"}, headers=coordinator)
    assert filtered.json() == []
