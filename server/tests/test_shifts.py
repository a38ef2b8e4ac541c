"""
Tests for single-shift scheduling: create, read, update, delete.
"""
from datetime import date, time

import pytest

from shiftboard.core.error_handling import AuthorizationError, NotFoundError, ValidationError
from shiftboard.models.shift import DayOffType, ShiftStatus
from shiftboard.schemas.shift import ShiftCreate, ShiftUpdate
from shiftboard.services import shift_service


def shift_draft(location, position=None, **overrides) -> ShiftCreate:
    fields = dict(
        location_id=location.id,
        date="2024-06-10",
        position_id=position.id if position else None,
        start_time="09:00",
        end_time="17:00",
        break_minutes=30,
    )
    fields.update(overrides)
    return ShiftCreate(**fields)


@pytest.mark.asyncio
async def test_create_shift_defaults(db, locations, position, staff, principals):
    shift = await shift_service.create_shift(
        db, principals.manager, shift_draft(locations.downtown, position, user_id=staff.employee.id)
    )

    assert shift.status == ShiftStatus.SCHEDULED
    assert shift.is_published is False
    assert shift.is_paid is True
    assert shift.created_by == staff.manager.id
    assert shift.date == date(2024, 6, 10)
    assert shift.duration_minutes == 450


@pytest.mark.asyncio
async def test_create_overnight_shift(db, locations, position, principals):
    shift = await shift_service.create_shift(
        db, principals.manager,
        shift_draft(locations.downtown, position, start_time="22:00", end_time="06:00", break_minutes=0),
    )
    assert shift.start_time == time(22, 0)
    assert shift.duration_minutes == 480


@pytest.mark.asyncio
async def test_day_off_drops_shift_fields(db, locations, position, staff, principals):
    shift = await shift_service.create_shift(
        db, principals.manager,
        shift_draft(locations.downtown, position, user_id=staff.employee.id, is_day_off=True, is_open_shift=True),
    )

    assert shift.is_day_off is True
    assert shift.day_off_type == DayOffType.DAY_OFF
    assert shift.position_id is None
    assert shift.start_time is None
    assert shift.end_time is None
    assert shift.break_minutes == 0
    assert shift.is_open_shift is False
    assert shift.duration_minutes == 0


@pytest.mark.asyncio
async def test_day_off_keeps_given_type(db, locations, staff, principals):
    shift = await shift_service.create_shift(
        db, principals.manager,
        shift_draft(
            locations.downtown, user_id=staff.employee.id, is_day_off=True,
            day_off_type=DayOffType.VACATION, start_time=None, end_time=None,
        ),
    )
    assert shift.day_off_type == DayOffType.VACATION


@pytest.mark.asyncio
async def test_shift_requires_position_and_times(db, locations, position, principals):
    with pytest.raises(ValidationError):
        await shift_service.create_shift(db, principals.manager, shift_draft(locations.downtown))
    with pytest.raises(ValidationError):
        await shift_service.create_shift(
            db, principals.manager, shift_draft(locations.downtown, position, end_time=None)
        )


@pytest.mark.asyncio
async def test_normal_shift_clears_day_off_type(db, locations, position, principals):
    shift = await shift_service.create_shift(
        db, principals.manager, shift_draft(locations.downtown, position, day_off_type=DayOffType.SICK)
    )
    assert shift.day_off_type is None


@pytest.mark.asyncio
async def test_open_shift_has_no_worker(db, locations, position, staff, principals):
    shift = await shift_service.create_shift(
        db, principals.manager,
        shift_draft(locations.downtown, position, user_id=staff.employee.id, is_open_shift=True),
    )
    assert shift.is_open_shift is True
    assert shift.user_id is None


@pytest.mark.asyncio
async def test_create_rejects_location_outside_scope(db, locations, position, principals):
    with pytest.raises(AuthorizationError):
        await shift_service.create_shift(db, principals.manager, shift_draft(locations.northside, position))


@pytest.mark.asyncio
async def test_employee_cannot_create_shifts(db, locations, position, principals):
    with pytest.raises(AuthorizationError):
        await shift_service.create_shift(db, principals.employee, shift_draft(locations.downtown, position))


@pytest.mark.asyncio
async def test_supervisor_can_create_but_not_plan(db, locations, position, principals):
    await shift_service.create_shift(db, principals.supervisor, shift_draft(locations.downtown, position))
    with pytest.raises(AuthorizationError):
        await shift_service.bulk_create_shifts(
            db, principals.supervisor, [shift_draft(locations.downtown, position)]
        )


@pytest.mark.asyncio
async def test_create_rejects_unknown_worker(db, locations, position, principals):
    import uuid

    with pytest.raises(ValidationError):
        await shift_service.create_shift(
            db, principals.manager, shift_draft(locations.downtown, position, user_id=uuid.uuid4())
        )


@pytest.mark.asyncio
async def test_drafts_are_hidden_from_workers(db, locations, position, staff, principals):
    draft = await shift_service.create_shift(
        db, principals.manager, shift_draft(locations.downtown, position, user_id=staff.employee.id)
    )
    published = await shift_service.create_shift(
        db, principals.manager,
        shift_draft(locations.downtown, position, user_id=staff.employee.id, date="2024-06-11", is_published=True),
    )

    with pytest.raises(NotFoundError):
        await shift_service.get_shift(db, principals.employee, draft.id)
    assert (await shift_service.get_shift(db, principals.employee, published.id)).id == published.id

    shifts, total = await shift_service.list_shifts(db, principals.employee)
    assert total == 1
    assert [s.id for s in shifts] == [published.id]

    shifts, total = await shift_service.list_shifts(db, principals.manager)
    assert total == 2


@pytest.mark.asyncio
async def test_list_is_limited_to_scope(db, locations, position, principals):
    downtown = await shift_service.create_shift(db, principals.admin, shift_draft(locations.downtown, position))
    await shift_service.create_shift(db, principals.admin, shift_draft(locations.northside, position))

    shifts, total = await shift_service.list_shifts(db, principals.manager)
    assert total == 1
    assert shifts[0].id == downtown.id

    _, total = await shift_service.list_shifts(db, principals.super_admin)
    assert total == 2

    with pytest.raises(AuthorizationError):
        await shift_service.list_shifts(db, principals.manager, location_id=locations.northside.id)


@pytest.mark.asyncio
async def test_list_filters(db, locations, position, staff, principals):
    await shift_service.create_shift(
        db, principals.manager, shift_draft(locations.downtown, position, user_id=staff.employee.id)
    )
    await shift_service.create_shift(
        db, principals.manager, shift_draft(locations.downtown, position, date="2024-06-12", is_open_shift=True)
    )

    _, total = await shift_service.list_shifts(db, principals.manager, user_id=staff.employee.id)
    assert total == 1
    _, total = await shift_service.list_shifts(db, principals.manager, is_open_shift=True)
    assert total == 1
    _, total = await shift_service.list_shifts(
        db, principals.manager, start_date=date(2024, 6, 11), end_date=date(2024, 6, 30)
    )
    assert total == 1


@pytest.mark.asyncio
async def test_out_of_scope_shift_looks_missing(db, locations, position, principals):
    shift = await shift_service.create_shift(db, principals.admin, shift_draft(locations.northside, position))
    with pytest.raises(NotFoundError):
        await shift_service.get_shift(db, principals.manager, shift.id)


@pytest.mark.asyncio
async def test_update_turns_shift_into_day_off(db, locations, position, staff, principals):
    shift = await shift_service.create_shift(
        db, principals.manager, shift_draft(locations.downtown, position, user_id=staff.employee.id)
    )
    updated = await shift_service.update_shift(
        db, principals.manager, shift.id, ShiftUpdate(is_day_off=True, day_off_type=DayOffType.SICK)
    )

    assert updated.is_day_off is True
    assert updated.day_off_type == DayOffType.SICK
    assert updated.start_time is None
    assert updated.position_id is None
    assert updated.user_id == staff.employee.id


@pytest.mark.asyncio
async def test_update_assigning_worker_closes_open_shift(db, locations, position, staff, principals):
    shift = await shift_service.create_shift(
        db, principals.manager, shift_draft(locations.downtown, position, is_open_shift=True)
    )
    updated = await shift_service.update_shift(
        db, principals.manager, shift.id, ShiftUpdate(user_id=staff.coworker.id)
    )
    assert updated.user_id == staff.coworker.id
    assert updated.is_open_shift is False


@pytest.mark.asyncio
async def test_update_reopening_shift_drops_worker(db, locations, position, staff, principals):
    shift = await shift_service.create_shift(
        db, principals.manager, shift_draft(locations.downtown, position, user_id=staff.employee.id)
    )
    updated = await shift_service.update_shift(
        db, principals.manager, shift.id, ShiftUpdate(is_open_shift=True)
    )
    assert updated.is_open_shift is True
    assert updated.user_id is None


@pytest.mark.asyncio
async def test_update_times(db, locations, position, principals):
    shift = await shift_service.create_shift(db, principals.manager, shift_draft(locations.downtown, position))
    updated = await shift_service.update_shift(
        db, principals.manager, shift.id, ShiftUpdate(start_time="12:00", end_time="20:00", break_minutes=0)
    )
    assert updated.duration_minutes == 480


@pytest.mark.asyncio
async def test_update_rejects_null_for_required_fields(db, locations, position, principals):
    shift = await shift_service.create_shift(db, principals.manager, shift_draft(locations.downtown, position))

    for field in ("is_published", "date", "status", "is_paid"):
        with pytest.raises(ValidationError, match=field):
            await shift_service.update_shift(db, principals.manager, shift.id, ShiftUpdate(**{field: None}))

    current = await shift_service.get_shift(db, principals.manager, shift.id)
    assert current.is_published is False
    assert current.date == date(2024, 6, 10)


@pytest.mark.asyncio
async def test_delete_shift(db, locations, position, principals):
    shift = await shift_service.create_shift(db, principals.manager, shift_draft(locations.downtown, position))
    await shift_service.delete_shift(db, principals.manager, shift.id)

    with pytest.raises(NotFoundError):
        await shift_service.get_shift(db, principals.manager, shift.id)


@pytest.mark.asyncio
async def test_employee_cannot_delete(db, locations, position, principals):
    shift = await shift_service.create_shift(
        db, principals.manager, shift_draft(locations.downtown, position, is_published=True)
    )
    with pytest.raises(AuthorizationError):
        await shift_service.delete_shift(db, principals.employee, shift.id)


def test_create_schema_rejects_loose_date():
    import pydantic

    with pytest.raises(pydantic.ValidationError):
        ShiftCreate(location_id="7d6f0c38-4f31-4d8e-9d0b-1d3f5f0c2a11", date="06/10/2024")
