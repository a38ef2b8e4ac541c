"""
Tests for the kiosk timeclock.
"""
from datetime import date

import pytest

from shiftboard.core.error_handling import AuthorizationError, ConflictError, NotFoundError
from shiftboard.models.timesheet import ClockStatus, TimesheetSource, TimesheetStatus
from shiftboard.services import kiosk_service, timesheet_service

from conftest import at

DAY = "2024-06-10"


@pytest.mark.asyncio
async def test_location_by_token(db, locations):
    location = await kiosk_service.get_location_by_token(db, locations.downtown.kiosk_token)
    assert location.id == locations.downtown.id

    with pytest.raises(NotFoundError):
        await kiosk_service.get_location_by_token(db, "not-a-token")
    with pytest.raises(NotFoundError):
        await kiosk_service.get_location_by_token(db, "")


@pytest.mark.asyncio
async def test_inactive_location_has_no_kiosk(db, locations):
    locations.northside.is_active = False
    await db.commit()

    with pytest.raises(NotFoundError):
        await kiosk_service.get_location_by_token(db, locations.northside.kiosk_token)


@pytest.mark.asyncio
async def test_employees_of_location(db, locations, staff):
    staff.coworker.is_active = False
    await db.commit()

    employees = await kiosk_service.list_kiosk_employees(db, locations.downtown)
    by_id = {user.id: has_pin for user, has_pin in employees}

    assert staff.employee.id in by_id
    assert by_id[staff.employee.id] is True
    assert by_id[staff.manager.id] is False
    assert staff.coworker.id not in by_id
    assert staff.north_employee.id not in by_id


@pytest.mark.asyncio
async def test_pin_check(db, locations, staff):
    employee = await kiosk_service.verify_employee_pin(db, locations.downtown, staff.employee.id, "1234")
    assert employee.id == staff.employee.id

    with pytest.raises(AuthorizationError) as exc_info:
        await kiosk_service.verify_employee_pin(db, locations.downtown, staff.employee.id, "9999")
    assert exc_info.value.status_code == 401
    with pytest.raises(AuthorizationError):
        await kiosk_service.verify_employee_pin(db, locations.downtown, staff.employee.id, None)


@pytest.mark.asyncio
async def test_worker_without_pin_passes(db, locations, staff):
    employee = await kiosk_service.verify_employee_pin(db, locations.downtown, staff.coworker.id, None)
    assert employee.id == staff.coworker.id


@pytest.mark.asyncio
async def test_worker_of_other_location_is_unknown(db, locations, staff):
    with pytest.raises(NotFoundError):
        await kiosk_service.verify_employee_pin(db, locations.downtown, staff.north_employee.id, None)


@pytest.mark.asyncio
async def test_kiosk_day_with_break(db, locations, staff):
    location, employee_id = locations.downtown, staff.employee.id

    timesheet = await kiosk_service.kiosk_clock_in(db, location, employee_id, "1234", now=at(DAY, "08:00"))
    assert timesheet.source == TimesheetSource.KIOSK
    assert timesheet.date == date(2024, 6, 10)

    await kiosk_service.kiosk_start_break(db, location, employee_id, "1234", now=at(DAY, "12:00"))
    status, _ = await kiosk_service.kiosk_status(db, location, employee_id, now=at(DAY, "12:10"))
    assert status == ClockStatus.ON_BREAK

    await kiosk_service.kiosk_end_break(db, location, employee_id, "1234", now=at(DAY, "12:30"))
    timesheet = await kiosk_service.kiosk_clock_out(db, location, employee_id, "1234", now=at(DAY, "16:00"))

    assert timesheet.total_minutes == 450
    assert timesheet.status == TimesheetStatus.SUBMITTED

    status, latest = await kiosk_service.kiosk_status(db, location, employee_id, now=at(DAY, "17:00"))
    assert status == ClockStatus.NOT_CLOCKED_IN
    assert latest.id == timesheet.id


@pytest.mark.asyncio
async def test_split_shifts_on_the_same_day(db, locations, staff):
    location, employee_id = locations.downtown, staff.coworker.id

    await kiosk_service.kiosk_clock_in(db, location, employee_id, now=at(DAY, "08:00"))
    morning = await kiosk_service.kiosk_clock_out(db, location, employee_id, now=at(DAY, "12:00"))
    await kiosk_service.kiosk_clock_in(db, location, employee_id, now=at(DAY, "17:00"))
    evening = await kiosk_service.kiosk_clock_out(db, location, employee_id, now=at(DAY, "21:00"))

    assert morning.id != evening.id
    assert morning.total_minutes == 240
    assert evening.total_minutes == 240

    records = await kiosk_service.todays_records(db, location, today=date(2024, 6, 10))
    assert [ts.id for ts, _ in records] == [evening.id, morning.id]


@pytest.mark.asyncio
async def test_kiosk_double_clock_in(db, locations, staff):
    await kiosk_service.kiosk_clock_in(db, locations.downtown, staff.coworker.id, now=at(DAY, "08:00"))
    with pytest.raises(ConflictError):
        await kiosk_service.kiosk_clock_in(db, locations.downtown, staff.coworker.id, now=at(DAY, "08:01"))


@pytest.mark.asyncio
async def test_wrong_pin_blocks_every_action(db, locations, staff):
    location, employee_id = locations.downtown, staff.employee.id
    with pytest.raises(AuthorizationError):
        await kiosk_service.kiosk_clock_in(db, location, employee_id, "0000", now=at(DAY, "08:00"))

    await kiosk_service.kiosk_clock_in(db, location, employee_id, "1234", now=at(DAY, "08:00"))
    with pytest.raises(AuthorizationError):
        await kiosk_service.kiosk_clock_out(db, location, employee_id, "0000", now=at(DAY, "16:00"))

    status, _ = await kiosk_service.kiosk_status(db, location, employee_id, now=at(DAY, "16:00"))
    assert status == ClockStatus.CLOCKED_IN


@pytest.mark.asyncio
async def test_kiosk_over_http(client, locations, staff):
    token = locations.downtown.kiosk_token
    employee_id = str(staff.employee.id)

    response = await client.get(f"/api/v1/kiosk/{token}")
    assert response.status_code == 200
    assert response.json()["name"] == "Downtown"
    assert response.json()["timezone"] == "UTC"

    response = await client.get(f"/api/v1/kiosk/{token}/employees")
    assert response.status_code == 200
    assert all("pin_hash" not in employee for employee in response.json())

    response = await client.post(f"/api/v1/kiosk/{token}/verify-pin", json={"employee_id": employee_id, "pin": "0000"})
    assert response.status_code == 401

    response = await client.post(f"/api/v1/kiosk/{token}/verify-pin", json={"employee_id": employee_id, "pin": "1234"})
    assert response.status_code == 200
    assert response.json() == {"valid": True, "pin_required": True}

    response = await client.post(f"/api/v1/kiosk/{token}/clock-in", json={"employee_id": employee_id, "pin": "1234"})
    assert response.status_code == 201
    assert response.json()["source"] == "kiosk"

    response = await client.get(f"/api/v1/kiosk/{token}/status/{employee_id}")
    assert response.json()["status"] == "CLOCKED_IN"

    response = await client.get(f"/api/v1/kiosk/{token}/today")
    assert response.status_code == 200
    assert response.json()[0]["employee_name"] == "Eve Tester"

    response = await client.post(f"/api/v1/kiosk/{token}/clock-out", json={"employee_id": employee_id, "pin": "1234"})
    assert response.status_code == 200
    assert response.json()["status"] == "SUBMITTED"

    response = await client.get("/api/v1/kiosk/unknown-token")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_kiosk_only_sees_sessions_of_its_location_and_day(db, locations, staff, principals):
    carried_over = await timesheet_service.clock_in(
        db, principals.coworker, locations.downtown.id, now=at("2024-06-09", "22:00")
    )
    kiosk = await kiosk_service.kiosk_clock_in(db, locations.downtown, staff.coworker.id, now=at(DAY, "08:00"))

    assert kiosk.id != carried_over.id
    assert kiosk.session_key != carried_over.session_key
    with pytest.raises(ConflictError):
        await timesheet_service.clock_in(db, principals.coworker, locations.downtown.id, now=at(DAY, "08:05"))
