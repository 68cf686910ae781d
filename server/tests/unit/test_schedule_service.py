"""Unit tests for schedule service."""

from datetime import date, time, timedelta

import pytest
from sqlalchemy import select

from boattours.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from boattours.models import Notification, TripSchedule
from boattours.schemas.booking import CancelBookingRequest, CreateBookingRequest
from boattours.schemas.schedule import (
    AssignScheduleRequest,
    CreateScheduleRequest,
    DeleteScheduleRequest,
    UpdateScheduleRequest,
)
from boattours.services.booking_service import BookingService
from boattours.services.schedule_service import ScheduleService
from boattours.services.seat_ledger import SeatLedger


async def book(session, schedule_id, actor, passengers, count=2):
    return await BookingService(session).create_booking(
        CreateBookingRequest(
            schedule_id=schedule_id,
            number_of_passengers=count,
            passengers=passengers(count),
            payment_method="online",
        ),
        actor,
    )


@pytest.mark.asyncio
async def test_create_schedule_defaults_to_trip_capacity(test_session, trip, admin_actor):
    """Test that a new schedule opens with the trip's capacity."""
    service = ScheduleService(test_session)

    schedule = await service.create_schedule(
        CreateScheduleRequest(
            trip_id=trip.id,
            scheduled_date=date.today() + timedelta(days=7),
            departure_time=time(10, 0),
            return_time=time(13, 0),
        ),
        admin_actor,
    )

    assert schedule.id is not None
    assert schedule.capacity == trip.max_capacity
    assert schedule.available_seats == trip.max_capacity
    assert schedule.status == "scheduled"

    entries = await SeatLedger(test_session).get_entries(schedule.id)
    assert [(entry.reason, entry.delta) for entry in entries] == [("resize", trip.max_capacity)]


@pytest.mark.asyncio
async def test_create_schedule_requires_admin(test_session, trip, operations_actor):
    """Test that only admins create schedules."""
    service = ScheduleService(test_session)

    with pytest.raises(AuthorizationError):
        await service.create_schedule(
            CreateScheduleRequest(
                trip_id=trip.id,
                scheduled_date=date.today() + timedelta(days=7),
                departure_time=time(10, 0),
            ),
            operations_actor,
        )


@pytest.mark.asyncio
async def test_create_schedule_inactive_trip(test_session, trip, admin_actor):
    """Test that inactive trips cannot be scheduled."""
    trip.is_active = False
    await test_session.commit()

    with pytest.raises(NotFoundError):
        await ScheduleService(test_session).create_schedule(
            CreateScheduleRequest(
                trip_id=trip.id,
                scheduled_date=date.today() + timedelta(days=7),
                departure_time=time(10, 0),
                capacity=6,
            ),
            admin_actor,
        )


@pytest.mark.asyncio
async def test_update_schedule_capacity(test_session, schedule, admin_actor, customer_actor, passengers):
    """Test that resizing a schedule keeps its booked seats."""
    await book(test_session, schedule.id, customer_actor, passengers, count=3)
    service = ScheduleService(test_session)

    updated = await service.update_schedule(
        UpdateScheduleRequest(schedule_id=schedule.id, capacity=6, departure_time=time(8, 30)),
        admin_actor,
    )

    assert updated.capacity == 6
    assert updated.available_seats == 3
    assert updated.departure_time == time(8, 30)


@pytest.mark.asyncio
async def test_update_schedule_capacity_below_booked(test_session, schedule, admin_actor, customer_actor, passengers):
    """Test that capacity cannot drop below the booked seats."""
    await book(test_session, schedule.id, customer_actor, passengers, count=5)

    with pytest.raises(ConflictError):
        await ScheduleService(test_session).update_schedule(
            UpdateScheduleRequest(schedule_id=schedule.id, capacity=4),
            admin_actor,
        )


@pytest.mark.asyncio
async def test_cancel_schedule_with_active_bookings(test_session, schedule, admin_actor, customer_actor, passengers):
    """Test that a schedule with active bookings cannot be cancelled."""
    await book(test_session, schedule.id, customer_actor, passengers)

    with pytest.raises(ConflictError):
        await ScheduleService(test_session).update_schedule(
            UpdateScheduleRequest(schedule_id=schedule.id, status="cancelled"),
            admin_actor,
        )


@pytest.mark.asyncio
async def test_delete_schedule_without_bookings(test_session, schedule, admin_actor):
    """Test that an unbooked schedule is deleted."""
    schedule_id = schedule.id

    result = await ScheduleService(test_session).delete_schedule(
        DeleteScheduleRequest(schedule_id=schedule_id),
        admin_actor,
    )

    assert result is None
    remaining = (await test_session.execute(select(TripSchedule.id).where(TripSchedule.id == schedule_id))).first()
    assert remaining is None


@pytest.mark.asyncio
async def test_delete_schedule_with_active_bookings(test_session, schedule, admin_actor, customer_actor, passengers):
    """Test that schedules with active bookings are not deleted."""
    await book(test_session, schedule.id, customer_actor, passengers)

    with pytest.raises(ConflictError):
        await ScheduleService(test_session).delete_schedule(
            DeleteScheduleRequest(schedule_id=schedule.id),
            admin_actor,
        )


@pytest.mark.asyncio
async def test_delete_schedule_with_cancelled_bookings(test_session, schedule, admin_actor, customer_actor, passengers):
    """Test that a schedule with booking history is kept as cancelled."""
    booking = await book(test_session, schedule.id, customer_actor, passengers)
    await BookingService(test_session).cancel_booking(CancelBookingRequest(booking_id=booking.id), customer_actor)

    kept = await ScheduleService(test_session).delete_schedule(
        DeleteScheduleRequest(schedule_id=schedule.id),
        admin_actor,
    )

    assert kept is not None
    assert kept.status == "cancelled"


@pytest.mark.asyncio
async def test_assign_boat_and_guide(test_session, notifier, schedule, boat, guide, operations_actor):
    """Test staffing a schedule confirms it and notifies the guide."""
    service = ScheduleService(test_session, notifier=notifier)

    assigned = await service.assign(
        AssignScheduleRequest(schedule_id=schedule.id, boat_id=boat.id, guide_id=guide.id),
        operations_actor,
    )

    assert assigned.boat_id == boat.id
    assert assigned.guide_id == guide.id
    assert assigned.status == "confirmed"

    stmt = select(Notification).where(Notification.user_id == guide.id)
    notifications = list((await test_session.execute(stmt)).scalars())
    assert len(notifications) == 1
    assert notifications[0].title == "New Assignment"
    assert notifications[0].type == "assignment"


@pytest.mark.asyncio
async def test_assign_requires_guide_role(test_session, schedule, customer, operations_actor):
    """Test that only active guides can be assigned."""
    with pytest.raises(ValidationError):
        await ScheduleService(test_session).assign(
            AssignScheduleRequest(schedule_id=schedule.id, guide_id=customer.id),
            operations_actor,
        )


@pytest.mark.asyncio
async def test_assign_unavailable_boat(test_session, schedule, boat, operations_actor):
    """Test that unavailable boats cannot be assigned."""
    boat.is_available = False
    await test_session.commit()

    with pytest.raises(ConflictError):
        await ScheduleService(test_session).assign(
            AssignScheduleRequest(schedule_id=schedule.id, boat_id=boat.id),
            operations_actor,
        )


@pytest.mark.asyncio
async def test_assign_requires_staff(test_session, schedule, guide, guide_actor):
    """Test that guides cannot staff schedules themselves."""
    with pytest.raises(AuthorizationError):
        await ScheduleService(test_session).assign(
            AssignScheduleRequest(schedule_id=schedule.id, guide_id=guide.id),
            guide_actor,
        )
