"""
Tests for the dashboard rollups.
"""
from datetime import date

import pytest

from shiftboard.core.error_handling import AuthorizationError, NotFoundError
from shiftboard.schemas.shift import ShiftCreate
from shiftboard.schemas.time_off import TimeOffCreate
from shiftboard.services import dashboard_service, shift_service, time_off_service, timesheet_service

from conftest import at

TODAY = date(2024, 6, 10)


async def seed_week(db, locations, position, staff, principals):
    downtown, northside = locations.downtown, locations.northside

    def shift(location, day, **fields):
        values = dict(location_id=location.id, date=day, position_id=position.id, start_time="09:00", end_time="17:00")
        values.update(fields)
        return ShiftCreate(**values)

    await shift_service.bulk_create_shifts(db, principals.admin, [
        shift(downtown, "2024-06-10", user_id=staff.employee.id, break_minutes=30, is_published=True),
        shift(downtown, "2024-06-10", user_id=staff.coworker.id, start_time="22:00", end_time="06:00",
              is_published=True),
        shift(downtown, "2024-06-10", user_id=staff.supervisor.id, is_day_off=True),
        shift(downtown, "2024-06-11"),
        shift(downtown, "2024-06-12", is_open_shift=True, is_published=True),
        shift(northside, "2024-06-10", user_id=staff.north_employee.id, is_published=True),
    ])
    await time_off_service.create_request(
        db, principals.employee,
        TimeOffCreate(type="VACATION", start_date="2024-07-01", end_date="2024-07-05"),
    )


@pytest.mark.asyncio
async def test_overview_for_a_location_manager(db, locations, position, staff, principals):
    await seed_week(db, locations, position, staff, principals)
    await timesheet_service.clock_in(db, principals.employee, locations.downtown.id, now=at("2024-06-10", "08:00"))

    overview = await dashboard_service.get_overview(db, principals.manager, today=TODAY)

    assert overview["can_view_all"] is False
    assert [row["name"] for row in overview["locations"]] == ["Downtown"]
    row = overview["locations"][0]
    assert row["total_employees"] == 5
    assert row["today_shifts"] == 2
    assert row["clocked_in"] == 1
    assert row["pending_requests"] == 1
    assert row["open_shifts"] == 1
    assert row["alerts"] == 1
    assert overview["totals"]["today_shifts"] == 2


@pytest.mark.asyncio
async def test_overview_for_everything(db, locations, position, staff, principals):
    await seed_week(db, locations, position, staff, principals)

    overview = await dashboard_service.get_overview(db, principals.super_admin, today=TODAY)

    assert overview["can_view_all"] is True
    assert [row["name"] for row in overview["locations"]] == ["Downtown", "Northside"]
    assert overview["totals"]["total_employees"] == 8
    assert overview["totals"]["today_shifts"] == 3
    assert overview["totals"]["clocked_in"] == 0


@pytest.mark.asyncio
async def test_location_stats(db, locations, position, staff, principals):
    await seed_week(db, locations, position, staff, principals)
    await timesheet_service.clock_in(db, principals.employee, locations.downtown.id, now=at("2024-06-10", "08:00"))
    await timesheet_service.clock_out(db, principals.employee, now=at("2024-06-10", "16:00"))

    stats = await dashboard_service.get_location_stats(
        db, principals.manager, locations.downtown.id, TODAY, TODAY
    )

    # 09:00-17:00 less 30 minutes, plus 22:00-06:00 overnight
    assert stats["scheduled_hours"] == 15.5
    assert stats["worked_hours"] == 8.0
    assert stats["variance"] == -7.5
    assert stats["total_shifts"] == 2
    assert stats["positions"] == [
        {"position_id": position.id, "name": "Barista", "color": "#10B981", "employees": 2}
    ]


@pytest.mark.asyncio
async def test_location_stats_access(db, locations, principals):
    with pytest.raises(AuthorizationError):
        await dashboard_service.get_location_stats(db, principals.employee, locations.downtown.id, TODAY, TODAY)
    with pytest.raises(NotFoundError):
        await dashboard_service.get_location_stats(
            db, principals.north_manager, locations.downtown.id, TODAY, TODAY
        )


@pytest.mark.asyncio
async def test_today_shifts_hide_drafts_from_workers(db, locations, position, staff, principals):
    await seed_week(db, locations, position, staff, principals)

    groups = await dashboard_service.get_today_shifts(db, principals.employee, today=TODAY)
    assert [group["name"] for group in groups] == ["Downtown"]
    assert len(groups[0]["shifts"]) == 2

    groups = await dashboard_service.get_today_shifts(db, principals.manager, today=TODAY)
    assert len(groups[0]["shifts"]) == 3


@pytest.mark.asyncio
async def test_alerts(db, locations, position, staff, principals):
    await seed_week(db, locations, position, staff, principals)

    alerts = await dashboard_service.get_alerts(db, principals.employee, today=TODAY)
    assert [alert["type"] for alert in alerts] == [dashboard_service.OPEN_SHIFT_ALERT]

    alerts = await dashboard_service.get_alerts(db, principals.manager, today=TODAY)
    assert sorted(alert["type"] for alert in alerts) == [
        dashboard_service.OPEN_SHIFT_ALERT,
        dashboard_service.PENDING_REQUEST_ALERT,
    ]
    created = [alert["created_at"] for alert in alerts]
    assert created == sorted(created, reverse=True)

    alerts = await dashboard_service.get_alerts(db, principals.north_manager, today=TODAY)
    assert alerts == []


@pytest.mark.asyncio
async def test_open_shift_alerts_respect_the_window(db, locations, position, staff, principals):
    await seed_week(db, locations, position, staff, principals)

    alerts = await dashboard_service.get_alerts(db, principals.employee, today=date(2024, 6, 13))
    assert alerts == []
