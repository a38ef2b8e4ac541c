"""
HTTP-level tests: authentication, input validation and the main routes.
"""
import pytest

from conftest import auth_headers


def shift_body(locations, position, **overrides) -> dict:
    body = {
        "location_id": str(locations.downtown.id),
        "date": "2024-06-10",
        "position_id": str(position.id),
        "start_time": "09:00",
        "end_time": "17:00",
        "break_minutes": 30,
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["database"]["status"] == "connected"

    response = await client.get("/api/v1/health/live")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_missing_token_is_rejected(client, staff):
    response = await client.get("/api/v1/shifts")
    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_bad_token_is_rejected(client, staff):
    response = await client.get("/api/v1/shifts", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_inactive_user_is_rejected(client, db, staff):
    staff.coworker.is_active = False
    await db.commit()

    response = await client.get("/api/v1/shifts", headers=auth_headers(staff.coworker))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_shift_crud_over_http(client, locations, position, staff):
    manager = auth_headers(staff.manager)

    response = await client.post("/api/v1/shifts", json=shift_body(locations, position), headers=manager)
    assert response.status_code == 201
    shift = response.json()
    assert shift["duration_minutes"] == 450
    assert shift["is_published"] is False

    response = await client.put(
        f"/api/v1/shifts/{shift['id']}", json={"user_id": str(staff.employee.id)}, headers=manager
    )
    assert response.status_code == 200
    assert response.json()["user_id"] == str(staff.employee.id)

    response = await client.put(f"/api/v1/shifts/{shift['id']}", json={"is_published": None}, headers=manager)
    assert response.status_code == 400

    response = await client.get(f"/api/v1/shifts/{shift['id']}", headers=auth_headers(staff.employee))
    assert response.status_code == 404

    response = await client.post(
        "/api/v1/shifts/publish",
        json={"location_id": str(locations.downtown.id), "start_date": "2024-06-10", "end_date": "2024-06-16"},
        headers=manager,
    )
    assert response.json() == {"count": 1}

    response = await client.get(
        "/api/v1/shifts", params={"start_date": "2024-06-10"}, headers=auth_headers(staff.employee)
    )
    assert [s["id"] for s in response.json()] == [shift["id"]]

    response = await client.delete(f"/api/v1/shifts/{shift['id']}", headers=manager)
    assert response.status_code == 204
    response = await client.get(f"/api/v1/shifts/{shift['id']}", headers=manager)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_bad_dates_and_ids(client, locations, position, staff):
    manager = auth_headers(staff.manager)

    response = await client.post(
        "/api/v1/shifts", json=shift_body(locations, position, date="06/10/2024"), headers=manager
    )
    assert response.status_code == 422
    assert response.json()["detail"]

    response = await client.get("/api/v1/shifts", params={"start_date": "2024-6-1"}, headers=manager)
    assert response.status_code == 400

    response = await client.get("/api/v1/shifts/not-a-uuid", headers=manager)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_errors_map_to_status_codes(client, locations, position, staff):
    response = await client.post(
        "/api/v1/shifts", json=shift_body(locations, position), headers=auth_headers(staff.employee)
    )
    assert response.status_code == 403

    response = await client.post(
        "/api/v1/shifts",
        json=shift_body(locations, position, location_id=str(locations.northside.id)),
        headers=auth_headers(staff.manager),
    )
    assert response.status_code == 403

    response = await client.post(
        "/api/v1/shifts", json=shift_body(locations, position, position_id=None), headers=auth_headers(staff.manager)
    )
    assert response.status_code == 400

    response = await client.post(
        "/api/v1/shifts/copy-week",
        json={
            "location_id": str(locations.downtown.id),
            "source_week_start": "2024-06-10",
            "target_week_start": "2024-06-17",
        },
        headers=auth_headers(staff.manager),
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_claim_over_http(client, locations, position, staff):
    response = await client.post(
        "/api/v1/shifts",
        json=shift_body(locations, position, is_open_shift=True, is_published=True),
        headers=auth_headers(staff.manager),
    )
    shift_id = response.json()["id"]

    response = await client.post(f"/api/v1/shifts/{shift_id}/claim", headers=auth_headers(staff.employee))
    assert response.status_code == 200
    assert response.json()["user_id"] == str(staff.employee.id)

    response = await client.post(f"/api/v1/shifts/{shift_id}/claim", headers=auth_headers(staff.coworker))
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_timeclock_over_http(client, locations, staff):
    employee = auth_headers(staff.employee)

    response = await client.post(
        "/api/v1/timesheets/clock-in", json={"location_id": str(locations.downtown.id)}, headers=employee
    )
    assert response.status_code == 201
    timesheet_id = response.json()["id"]

    response = await client.post(
        "/api/v1/timesheets/clock-in", json={"location_id": str(locations.downtown.id)}, headers=employee
    )
    assert response.status_code == 409

    response = await client.get("/api/v1/timesheets/status", headers=employee)
    assert response.json()["status"] == "CLOCKED_IN"

    response = await client.post("/api/v1/timesheets/break/end", headers=employee)
    assert response.status_code == 409

    response = await client.post("/api/v1/timesheets/clock-out", headers=employee)
    assert response.status_code == 200
    assert response.json()["status"] == "SUBMITTED"

    response = await client.post(f"/api/v1/timesheets/{timesheet_id}/approve", headers=auth_headers(staff.manager))
    assert response.status_code == 200
    assert response.json()["status"] == "APPROVED"

    response = await client.get("/api/v1/timesheets", headers=employee)
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_time_off_over_http(client, locations, position, staff):
    await client.post(
        "/api/v1/shifts",
        json=shift_body(locations, position, user_id=str(staff.employee.id), date="2024-06-11"),
        headers=auth_headers(staff.manager),
    )

    response = await client.post(
        "/api/v1/time-off",
        json={"type": "VACATION", "start_date": "2024-06-10", "end_date": "2024-06-12"},
        headers=auth_headers(staff.employee),
    )
    assert response.status_code == 201
    assert response.json()["overlapping_shifts"] == 1
    request_id = response.json()["request"]["id"]

    response = await client.get("/api/v1/time-off/pending-count", headers=auth_headers(staff.manager))
    assert response.json() == {"count": 1}

    response = await client.post(f"/api/v1/time-off/{request_id}/approve", headers=auth_headers(staff.manager))
    assert response.status_code == 200
    assert response.json()["cancelled_shifts"] == 1
    assert response.json()["request"]["status"] == "APPROVED"

    response = await client.post(f"/api/v1/time-off/{request_id}/approve", headers=auth_headers(staff.manager))
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_locations_hide_kiosk_token_from_workers(client, locations, staff):
    response = await client.get("/api/v1/locations", headers=auth_headers(staff.employee))
    assert [loc["name"] for loc in response.json()] == ["Downtown"]
    assert response.json()[0]["kiosk_token"] is None

    response = await client.get("/api/v1/locations", headers=auth_headers(staff.admin))
    assert [loc["name"] for loc in response.json()] == ["Downtown", "Northside"]
    assert response.json()[0]["kiosk_token"] == locations.downtown.kiosk_token


@pytest.mark.asyncio
async def test_headquarters_and_token_rotation(client, locations, staff):
    admin = auth_headers(staff.admin)

    response = await client.post(f"/api/v1/locations/{locations.northside.id}/headquarters", headers=admin)
    assert response.status_code == 200
    assert response.json()["is_headquarters"] is True

    response = await client.get("/api/v1/locations", headers=admin)
    assert [loc["is_headquarters"] for loc in response.json()] == [True, False]
    assert response.json()[0]["name"] == "Northside"

    old_token = locations.downtown.kiosk_token
    response = await client.post(f"/api/v1/locations/{locations.downtown.id}/rotate-token", headers=admin)
    assert response.status_code == 200
    assert response.json()["kiosk_token"] != old_token

    response = await client.get(f"/api/v1/kiosk/{old_token}")
    assert response.status_code == 404

    response = await client.post(f"/api/v1/locations/{locations.downtown.id}/rotate-token",
                                 headers=auth_headers(staff.manager))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_dashboard_over_http(client, locations, staff):
    manager = auth_headers(staff.manager)

    response = await client.get("/api/v1/dashboard/overview", params={"date": "2024-06-10"}, headers=manager)
    assert response.status_code == 200
    assert response.json()["locations"][0]["total_employees"] == 5

    response = await client.get("/api/v1/dashboard/overview", params={"date": "June 10"}, headers=manager)
    assert response.status_code == 400

    response = await client.get(
        f"/api/v1/dashboard/locations/{locations.downtown.id}/stats",
        params={"start_date": "2024-06-10", "end_date": "2024-06-16"},
        headers=manager,
    )
    assert response.status_code == 200
    assert response.json()["scheduled_hours"] == 0

    response = await client.get("/api/v1/dashboard/alerts", headers=manager)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_pin_hash_never_leaves_the_server(client, locations, staff):
    responses = [
        await client.get(f"/api/v1/kiosk/{locations.downtown.kiosk_token}/employees"),
        await client.get("/api/v1/dashboard/overview", headers=auth_headers(staff.employee)),
        await client.get("/api/v1/locations", headers=auth_headers(staff.admin)),
    ]
    for response in responses:
        assert response.status_code == 200
        assert "pin_hash" not in response.text
