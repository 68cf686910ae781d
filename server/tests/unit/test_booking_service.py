"""Unit tests for booking service."""

import logging
from datetime import date, timedelta

import pytest
from sqlalchemy import func, select

from boattours.core.config import settings
from boattours.core.exceptions import (
    AuthorizationError,
    CapacityError,
    ConflictError,
    NotFoundError,
    PolicyViolationError,
    ValidationError,
)
from boattours.domain.cancellation_policy import departure_datetime
from boattours.gateways.base import PaymentGateway, PaymentResult, RefundResult
from boattours.models import Booking, Notification, PaymentRecordStatus, ScheduleStatus, TripSchedule
from boattours.schemas.booking import (
    CancelBookingRequest,
    ConfirmBookingRequest,
    CreateBookingRequest,
    PayBookingRequest,
    UpdateBookingStatusRequest,
)
from boattours.services.booking_service import BookingService, utcnow
from boattours.services.seat_ledger import SeatLedger


class DecliningGateway(PaymentGateway):
    """Gateway that declines every charge."""

    name = "declining"

    async def charge(self, amount, currency, reference, payment_method):
        return PaymentResult(success=False, error_message="Card declined")

    async def refund(self, transaction_id, amount, reason):
        return RefundResult(success=False, error_message="Nothing to refund")


class RecordingGateway(PaymentGateway):
    """Gateway that approves everything and remembers refunds."""

    name = "recording"

    def __init__(self):
        self.refunds = []

    async def charge(self, amount, currency, reference, payment_method):
        return PaymentResult(success=True, transaction_id=f"TXN-{reference}")

    async def refund(self, transaction_id, amount, reason):
        self.refunds.append((transaction_id, amount))
        return RefundResult(success=True, refund_id=f"refund_{transaction_id}")


class RefundDecliningGateway(RecordingGateway):
    """Gateway that approves charges but declines refunds."""

    async def refund(self, transaction_id, amount, reason):
        return RefundResult(success=False, error_message="Refund window closed")


def booking_request(schedule_id, passengers, count=2, payment_method="online"):
    return CreateBookingRequest(
        schedule_id=schedule_id,
        number_of_passengers=count,
        passengers=passengers(count),
        payment_method=payment_method,
    )


async def available_seats(session, schedule_id):
    counter = await SeatLedger(session).get_counter(schedule_id)
    return counter.available_seats


async def notification_titles(session, user_id):
    stmt = select(Notification.title).where(Notification.user_id == user_id).order_by(Notification.id)
    return list((await session.execute(stmt)).scalars())


@pytest.mark.asyncio
async def test_create_booking(test_session, notifier, customer_actor, schedule, passengers):
    """Test creating a booking reserves seats and opens a pending booking."""
    service = BookingService(test_session, notifier=notifier)

    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)

    assert booking.id is not None
    assert booking.booking_status == "pending"
    assert booking.payment_status == "pending"
    assert booking.total_amount == 9000
    assert booking.currency == "USD"
    assert booking.booking_reference.startswith(settings.booking_reference_prefix)
    assert len(booking.booking_reference) == len(settings.booking_reference_prefix) + 8
    assert await available_seats(test_session, schedule.id) == 8

    loaded = await service.get_booking(booking.id)
    assert loaded.payment.payment_status == PaymentRecordStatus.PENDING
    assert loaded.payment.amount == 9000

    assert await notification_titles(test_session, customer_actor.user_id) == ["Booking Created"]


@pytest.mark.asyncio
async def test_create_booking_passenger_mismatch(test_session, customer_actor, schedule, passengers):
    """Test that the passenger list must match the passenger count."""
    service = BookingService(test_session)
    request = CreateBookingRequest(
        schedule_id=schedule.id,
        number_of_passengers=3,
        passengers=passengers(2),
        payment_method="online",
    )

    with pytest.raises(ValidationError):
        await service.create_booking(request, customer_actor)

    assert await available_seats(test_session, schedule.id) == 10


@pytest.mark.asyncio
async def test_create_booking_unknown_schedule(test_session, customer_actor, passengers):
    """Test booking a schedule that does not exist."""
    service = BookingService(test_session)

    with pytest.raises(NotFoundError):
        await service.create_booking(booking_request(999, passengers), customer_actor)


@pytest.mark.asyncio
async def test_create_booking_inactive_trip(test_session, customer_actor, trip, schedule, passengers):
    """Test that schedules of deactivated trips cannot be booked."""
    trip.is_active = False
    await test_session.commit()

    service = BookingService(test_session)
    with pytest.raises(NotFoundError):
        await service.create_booking(booking_request(schedule.id, passengers), customer_actor)


@pytest.mark.asyncio
async def test_create_booking_cancelled_schedule(test_session, customer_actor, schedule, passengers):
    """Test that only scheduled sailings accept bookings."""
    schedule.status = ScheduleStatus.CANCELLED.value
    await test_session.commit()

    service = BookingService(test_session)
    with pytest.raises(NotFoundError):
        await service.create_booking(booking_request(schedule.id, passengers), customer_actor)


@pytest.mark.asyncio
async def test_create_booking_insufficient_capacity(test_session, customer_actor, schedule, passengers):
    """Test that a booking larger than the remaining seats is rejected with nothing stored."""
    service = BookingService(test_session)
    await service.create_booking(booking_request(schedule.id, passengers, count=8), customer_actor)

    with pytest.raises(CapacityError) as exc_info:
        await service.create_booking(booking_request(schedule.id, passengers, count=3), customer_actor)

    assert exc_info.value.problem_details["code"] == "FULL"
    assert exc_info.value.problem_details["conflicting_resource"]["available_seats"] == 2
    assert await available_seats(test_session, schedule.id) == 2

    count = (await test_session.execute(select(func.count(Booking.id)))).scalar()
    assert count == 1


@pytest.mark.asyncio
async def test_seat_counter_through_book_cancel_fill(test_session, customer_actor, other_customer_actor,
                                                     schedule, passengers):
    """Test the seat counter across booking, cancelling, filling up and overbooking."""
    service = BookingService(test_session)
    assert await available_seats(test_session, schedule.id) == 10

    first = await service.create_booking(booking_request(schedule.id, passengers, count=3), customer_actor)
    assert await available_seats(test_session, schedule.id) == 7

    await service.cancel_booking(CancelBookingRequest(booking_id=first.id), customer_actor)
    assert await available_seats(test_session, schedule.id) == 10

    await service.create_booking(booking_request(schedule.id, passengers, count=10), other_customer_actor)
    assert await available_seats(test_session, schedule.id) == 0

    with pytest.raises(CapacityError):
        await service.create_booking(booking_request(schedule.id, passengers, count=1), customer_actor)
    assert await available_seats(test_session, schedule.id) == 0


@pytest.mark.asyncio
async def test_last_seat_goes_to_one_booking(test_session, customer_actor, other_customer_actor,
                                              schedule_factory, passengers):
    """Test that the last seat can only be booked once."""
    last_seat = await schedule_factory(date.today() + timedelta(days=10), capacity=1)
    service = BookingService(test_session)

    await service.create_booking(booking_request(last_seat.id, passengers, count=1), customer_actor)
    with pytest.raises(CapacityError):
        await service.create_booking(booking_request(last_seat.id, passengers, count=1), other_customer_actor)

    assert await available_seats(test_session, last_seat.id) == 0


@pytest.mark.asyncio
async def test_cancel_booking_releases_seats(test_session, notifier, customer_actor, schedule, passengers):
    """Test that a customer cancellation gives the seats back."""
    service = BookingService(test_session, notifier=notifier)
    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)

    cancelled = await service.cancel_booking(CancelBookingRequest(booking_id=booking.id), customer_actor)

    assert cancelled.booking_status == "cancelled"
    assert await available_seats(test_session, schedule.id) == 10
    assert await notification_titles(test_session, customer_actor.user_id) == [
        "Booking Created",
        "Booking Cancelled",
    ]


@pytest.mark.asyncio
async def test_cancel_booking_twice(test_session, customer_actor, schedule, passengers):
    """Test that a second cancellation conflicts and releases nothing."""
    service = BookingService(test_session)
    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)
    await service.cancel_booking(CancelBookingRequest(booking_id=booking.id), customer_actor)

    with pytest.raises(ConflictError):
        await service.cancel_booking(CancelBookingRequest(booking_id=booking.id), customer_actor)

    assert await available_seats(test_session, schedule.id) == 10


@pytest.mark.asyncio
async def test_cancel_exactly_at_window_boundary(test_session, customer_actor, schedule, passengers):
    """Test that a customer may cancel exactly 24 hours before departure."""
    departure_at = departure_datetime(schedule.scheduled_date, schedule.departure_time, settings.tz)
    service = BookingService(test_session, clock=lambda: departure_at - timedelta(hours=24))
    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)

    cancelled = await service.cancel_booking(CancelBookingRequest(booking_id=booking.id), customer_actor)

    assert cancelled.booking_status == "cancelled"


@pytest.mark.asyncio
async def test_cancel_inside_window_rejected(test_session, customer_actor, schedule, passengers):
    """Test that a customer cannot cancel 23h59m before departure."""
    departure_at = departure_datetime(schedule.scheduled_date, schedule.departure_time, settings.tz)
    service = BookingService(test_session, clock=lambda: departure_at - timedelta(hours=23, minutes=59))
    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)

    with pytest.raises(PolicyViolationError) as exc_info:
        await service.cancel_booking(CancelBookingRequest(booking_id=booking.id), customer_actor)

    assert exc_info.value.problem_details["code"] == "CANCELLATION_WINDOW"
    reloaded = await service.get_booking(booking.id)
    assert reloaded.booking_status == "pending"
    assert await available_seats(test_session, schedule.id) == 8


@pytest.mark.asyncio
async def test_staff_cancel_ignores_window(test_session, customer_actor, operations_actor, schedule, passengers):
    """Test that staff may cancel inside the cancellation window."""
    departure_at = departure_datetime(schedule.scheduled_date, schedule.departure_time, settings.tz)
    service = BookingService(test_session, clock=lambda: departure_at - timedelta(hours=1))
    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)

    cancelled = await service.cancel_booking(CancelBookingRequest(booking_id=booking.id), operations_actor)

    assert cancelled.booking_status == "cancelled"
    assert await available_seats(test_session, schedule.id) == 10


@pytest.mark.asyncio
async def test_cancel_someone_elses_booking(test_session, customer_actor, other_customer_actor, schedule, passengers):
    """Test that customers can only cancel their own bookings."""
    service = BookingService(test_session)
    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)

    with pytest.raises(AuthorizationError):
        await service.cancel_booking(CancelBookingRequest(booking_id=booking.id), other_customer_actor)


@pytest.mark.asyncio
async def test_confirm_booking(test_session, notifier, customer_actor, admin_actor, schedule, passengers):
    """Test staff confirmation of a pending booking."""
    service = BookingService(test_session, notifier=notifier)
    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)

    confirmed = await service.confirm_booking(ConfirmBookingRequest(booking_id=booking.id), admin_actor)

    assert confirmed.booking_status == "confirmed"
    assert confirmed.payment_status == "pending"
    assert "Booking Confirmed" in await notification_titles(test_session, customer_actor.user_id)

    with pytest.raises(ConflictError):
        await service.confirm_booking(ConfirmBookingRequest(booking_id=booking.id), admin_actor)

    titles = await notification_titles(test_session, customer_actor.user_id)
    assert titles.count("Booking Confirmed") == 1
    assert (await service.get_booking(booking.id)).booking_status == "confirmed"


@pytest.mark.asyncio
async def test_confirm_booking_requires_staff(test_session, customer_actor, schedule, passengers):
    """Test that customers cannot confirm bookings."""
    service = BookingService(test_session)
    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)

    with pytest.raises(AuthorizationError):
        await service.confirm_booking(ConfirmBookingRequest(booking_id=booking.id), customer_actor)


@pytest.mark.asyncio
async def test_pay_booking(test_session, notifier, customer_actor, schedule, passengers):
    """Test that a successful payment marks the booking paid and confirmed."""
    service = BookingService(test_session, notifier=notifier)
    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)

    outcome = await service.pay_booking(
        PayBookingRequest(booking_id=booking.id, payment_method="online"),
        customer_actor,
    )

    assert outcome.success is True
    assert outcome.transaction_id.startswith("TXN")
    assert outcome.booking.payment_status == "paid"
    assert outcome.booking.booking_status == "confirmed"

    loaded = await service.get_booking(booking.id)
    assert loaded.payment.payment_status == PaymentRecordStatus.COMPLETED
    assert loaded.payment.transaction_id == outcome.transaction_id
    assert loaded.payment.payment_date is not None
    assert "Payment Successful" in await notification_titles(test_session, customer_actor.user_id)


@pytest.mark.asyncio
async def test_pay_booking_twice(test_session, customer_actor, schedule, passengers):
    """Test that a paid booking cannot be paid again and nothing changes."""
    service = BookingService(test_session)
    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)
    first = await service.pay_booking(
        PayBookingRequest(booking_id=booking.id, payment_method="online"),
        customer_actor,
    )
    paid = await service.get_booking(booking.id)
    payment_date = paid.payment.payment_date
    seats = await available_seats(test_session, schedule.id)

    with pytest.raises(ConflictError):
        await service.pay_booking(PayBookingRequest(booking_id=booking.id, payment_method="cash"), customer_actor)

    reloaded = await service.get_booking(booking.id)
    assert reloaded.booking_status == "confirmed"
    assert reloaded.payment_status == "paid"
    assert reloaded.payment.transaction_id == first.transaction_id
    assert reloaded.payment.payment_status == PaymentRecordStatus.COMPLETED
    assert reloaded.payment.payment_date == payment_date
    assert reloaded.payment.payment_method == "online"
    assert await available_seats(test_session, schedule.id) == seats == 8


@pytest.mark.asyncio
async def test_pay_cancelled_booking(test_session, customer_actor, schedule, passengers):
    """Test that cancelled bookings cannot be paid."""
    service = BookingService(test_session)
    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)
    await service.cancel_booking(CancelBookingRequest(booking_id=booking.id), customer_actor)

    with pytest.raises(ConflictError):
        await service.pay_booking(PayBookingRequest(booking_id=booking.id, payment_method="online"), customer_actor)


@pytest.mark.asyncio
async def test_declined_payment_can_be_retried(test_session, notifier, customer_actor, schedule, passengers):
    """Test that a declined charge marks the payment failed and a retry succeeds."""
    declining = BookingService(test_session, notifier=notifier, gateway=DecliningGateway())
    booking = await declining.create_booking(booking_request(schedule.id, passengers), customer_actor)

    outcome = await declining.pay_booking(
        PayBookingRequest(booking_id=booking.id, payment_method="online"),
        customer_actor,
    )

    assert outcome.success is False
    assert outcome.error_message == "Card declined"
    assert outcome.booking.payment_status == "failed"
    assert outcome.booking.booking_status == "pending"
    assert "Payment Failed" in await notification_titles(test_session, customer_actor.user_id)

    retry = await BookingService(test_session).pay_booking(
        PayBookingRequest(booking_id=booking.id, payment_method="cash"),
        customer_actor,
    )
    assert retry.success is True
    assert retry.booking.payment_status == "paid"
    assert retry.booking.booking_status == "confirmed"


@pytest.mark.asyncio
async def test_status_override_cancel_and_reinstate(test_session, customer_actor, admin_actor, schedule, passengers):
    """Test that staff overrides move seats across the cancelled boundary."""
    service = BookingService(test_session)
    booking = await service.create_booking(booking_request(schedule.id, passengers, count=3), customer_actor)

    await service.update_status(
        UpdateBookingStatusRequest(booking_id=booking.id, booking_status="cancelled", payment_status="pending"),
        admin_actor,
    )
    assert await available_seats(test_session, schedule.id) == 10

    reinstated = await service.update_status(
        UpdateBookingStatusRequest(booking_id=booking.id, booking_status="confirmed", payment_status="pending"),
        admin_actor,
    )
    assert reinstated.booking_status == "confirmed"
    assert await available_seats(test_session, schedule.id) == 7

    reasons = [entry.reason for entry in await SeatLedger(test_session).get_entries(schedule.id)]
    assert reasons == ["reserve", "release", "reinstate"]


@pytest.mark.asyncio
async def test_status_override_reinstate_on_full_schedule(test_session, customer_actor, other_customer_actor,
                                                         admin_actor, schedule_factory, passengers):
    """Test that a cancelled booking cannot be reinstated once its seats are gone."""
    small = await schedule_factory(date.today() + timedelta(days=10), capacity=2)
    service = BookingService(test_session)
    first = await service.create_booking(booking_request(small.id, passengers, count=2), customer_actor)
    await service.cancel_booking(CancelBookingRequest(booking_id=first.id), customer_actor)
    await service.create_booking(booking_request(small.id, passengers, count=2), other_customer_actor)

    with pytest.raises(CapacityError):
        await service.update_status(
            UpdateBookingStatusRequest(booking_id=first.id, booking_status="pending", payment_status="pending"),
            admin_actor,
        )

    reloaded = await service.get_booking(first.id)
    assert reloaded.booking_status == "cancelled"
    assert await available_seats(test_session, small.id) == 0


@pytest.mark.asyncio
async def test_status_override_refund(test_session, customer_actor, admin_actor, schedule, passengers):
    """Test that refunding a paid booking goes through the gateway."""
    gateway = RecordingGateway()
    service = BookingService(test_session, gateway=gateway)
    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)
    await service.pay_booking(PayBookingRequest(booking_id=booking.id, payment_method="online"), customer_actor)

    refunded = await service.update_status(
        UpdateBookingStatusRequest(booking_id=booking.id, booking_status="cancelled", payment_status="refunded"),
        admin_actor,
    )

    assert refunded.payment_status == "refunded"
    assert gateway.refunds == [(f"TXN-{booking.booking_reference}", 9000)]
    loaded = await service.get_booking(booking.id)
    assert loaded.payment.payment_status == PaymentRecordStatus.REFUNDED
    assert await available_seats(test_session, schedule.id) == 10


@pytest.mark.asyncio
async def test_status_override_refund_not_issued_when_reinstate_fails(
    test_session, customer_actor, other_customer_actor, admin_actor, schedule_factory, passengers
):
    """Test that no money goes back when the override itself cannot be written."""
    small = await schedule_factory(date.today() + timedelta(days=10), capacity=2)
    gateway = RecordingGateway()
    service = BookingService(test_session, gateway=gateway)
    first = await service.create_booking(booking_request(small.id, passengers, count=2), customer_actor)
    await service.pay_booking(PayBookingRequest(booking_id=first.id, payment_method="online"), customer_actor)
    await service.update_status(
        UpdateBookingStatusRequest(booking_id=first.id, booking_status="cancelled", payment_status="paid"),
        admin_actor,
    )
    await service.create_booking(booking_request(small.id, passengers, count=2), other_customer_actor)

    with pytest.raises(CapacityError):
        await service.update_status(
            UpdateBookingStatusRequest(booking_id=first.id, booking_status="confirmed", payment_status="refunded"),
            admin_actor,
        )

    assert gateway.refunds == []
    reloaded = await service.get_booking(first.id)
    assert reloaded.booking_status == "cancelled"
    assert reloaded.payment_status == "paid"
    assert reloaded.payment.payment_status == PaymentRecordStatus.COMPLETED
    assert await available_seats(test_session, small.id) == 0


@pytest.mark.asyncio
async def test_status_override_declined_refund_keeps_state(test_session, customer_actor, admin_actor,
                                                           schedule, passengers):
    """Test that a declined refund leaves the booking, payment and seats as they were."""
    service = BookingService(test_session, gateway=RefundDecliningGateway())
    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)
    booking_id = booking.id
    await service.pay_booking(PayBookingRequest(booking_id=booking_id, payment_method="online"), customer_actor)

    with pytest.raises(ConflictError):
        await service.update_status(
            UpdateBookingStatusRequest(booking_id=booking_id, booking_status="cancelled", payment_status="refunded"),
            admin_actor,
        )

    reloaded = await service.get_booking(booking_id)
    assert reloaded.booking_status == "confirmed"
    assert reloaded.payment_status == "paid"
    assert reloaded.payment.payment_status == PaymentRecordStatus.COMPLETED
    assert await available_seats(test_session, schedule.id) == 8


@pytest.mark.asyncio
async def test_status_override_requires_staff(test_session, customer_actor, schedule, passengers):
    """Test that customers cannot override booking status."""
    service = BookingService(test_session)
    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)

    with pytest.raises(AuthorizationError):
        await service.update_status(
            UpdateBookingStatusRequest(booking_id=booking.id, booking_status="confirmed", payment_status="paid"),
            customer_actor,
        )


@pytest.mark.asyncio
async def test_complete_departed(test_session, notifier, customer_actor, admin_actor,
                                 schedule, schedule_factory, passengers):
    """Test that departed schedules and their confirmed bookings are completed."""
    departed = await schedule_factory(utcnow().date() - timedelta(days=2))
    service = BookingService(test_session, notifier=notifier)

    confirmed = await service.create_booking(booking_request(departed.id, passengers), customer_actor)
    await service.confirm_booking(ConfirmBookingRequest(booking_id=confirmed.id), admin_actor)
    pending = await service.create_booking(booking_request(departed.id, passengers, count=1), customer_actor)
    upcoming = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)
    await service.confirm_booking(ConfirmBookingRequest(booking_id=upcoming.id), admin_actor)

    completed = await service.complete_departed()

    assert completed == 1
    assert (await service.get_booking(confirmed.id)).booking_status == "completed"
    assert (await service.get_booking(pending.id)).booking_status == "pending"
    assert (await service.get_booking(upcoming.id)).booking_status == "confirmed"

    stmt = select(TripSchedule.status).where(TripSchedule.id == departed.id)
    assert (await test_session.execute(stmt)).scalar() == "completed"
    assert "Trip Completed" in await notification_titles(test_session, customer_actor.user_id)


@pytest.mark.asyncio
async def test_complete_departed_logs_completed_count(test_session, customer_actor, admin_actor,
                                                      schedule_factory, passengers, monkeypatch, caplog):
    """Test that a booking skipped on conflict is not counted as completed."""
    departed = await schedule_factory(utcnow().date() - timedelta(days=2))
    service = BookingService(test_session)
    kept = await service.create_booking(booking_request(departed.id, passengers), customer_actor)
    skipped = await service.create_booking(booking_request(departed.id, passengers), customer_actor)
    for booking in (kept, skipped):
        await service.confirm_booking(ConfirmBookingRequest(booking_id=booking.id), admin_actor)
    skipped_id = skipped.id

    transition = service._transition

    async def conflicting_transition(booking, *args, **kwargs):
        if booking.id == skipped_id:
            raise ConflictError(detail="Booking was modified concurrently")
        return await transition(booking, *args, **kwargs)

    monkeypatch.setattr(service, "_transition", conflicting_transition)
    caplog.set_level(logging.INFO, logger="boattours.services.booking_service")

    assert await service.complete_departed() == 1

    records = [record for record in caplog.records if record.getMessage() == "Schedule completed"]
    assert len(records) == 1
    assert records[0].bookings_completed == 1
    assert (await service.get_booking(skipped_id)).booking_status == "confirmed"


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_booking(test_session, customer_actor, schedule, passengers):
    """Test that a broken notification store does not undo the booking."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

    from boattours.services.notification_service import NotificationEmitter

    # No tables exist in this database
    broken_engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    broken = NotificationEmitter(async_sessionmaker(broken_engine, class_=AsyncSession))
    service = BookingService(test_session, notifier=broken)

    booking = await service.create_booking(booking_request(schedule.id, passengers), customer_actor)

    assert booking.id is not None
    assert await available_seats(test_session, schedule.id) == 8
    assert await notification_titles(test_session, customer_actor.user_id) == []

    await broken_engine.dispose()
