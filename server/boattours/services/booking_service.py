"""Booking service: creation, payment and every booking status transition."""

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.attributes import set_committed_value

from ..core.config import settings
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ProblemDetailsException,
    ValidationError,
)
from ..core.observability import metrics_collector
from ..domain.actor import Actor
from ..domain.booking_state import (
    assert_booking_transition,
    assert_payment_transition,
    payment_record_status_for,
)
from ..domain.cancellation_policy import CancellationWindow, departure_datetime
from ..gateways.base import PaymentGateway
from ..gateways.simulated import SimulatedGateway
from ..models.booking import (
    Booking,
    BookingStatus,
    Passenger,
    Payment,
    PaymentRecordStatus,
    PaymentStatus,
)
from ..models.ledger import LedgerReason
from ..models.trip import ScheduleStatus, Trip, TripSchedule
from ..schemas.booking import (
    CancelBookingRequest,
    ConfirmBookingRequest,
    CreateBookingRequest,
    PayBookingRequest,
    UpdateBookingStatusRequest,
)
from . import notification_service as notices
from .notification_service import NotificationEmitter, NotificationMessage
from .seat_ledger import ACTIVE_STATUSES, SeatLedger

logger = logging.getLogger(__name__)

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
REFERENCE_LENGTH = 8
MAX_REFERENCE_ATTEMPTS = 5


def utcnow() -> datetime:
    """Timezone-aware current time, the default booking clock."""
    return datetime.now(timezone.utc)


def generate_booking_reference(prefix: Optional[str] = None) -> str:
    """Prefix followed by 8 random uppercase alphanumerics, e.g. ``BS7K2M9QXA``."""
    prefix = settings.booking_reference_prefix if prefix is None else prefix
    return prefix + ''.join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_LENGTH))


@dataclass
class PaymentOutcome:
    """Booking state after a payment attempt."""

    booking: Booking
    success: bool
    transaction_id: Optional[str] = None
    error_message: Optional[str] = None


class BookingService:
    """Service for booking-related operations."""

    def __init__(
        self,
        db: AsyncSession,
        notifier: Optional[NotificationEmitter] = None,
        gateway: Optional[PaymentGateway] = None,
        clock: Callable[[], datetime] = utcnow,
        window: Optional[CancellationWindow] = None,
    ):
        self.db = db
        self.ledger = SeatLedger(db)
        self.notifier = notifier
        self.gateway = gateway or SimulatedGateway()
        self.clock = clock
        self.window = window or CancellationWindow.of_hours(settings.cancellation_window_hours)

    async def create_booking(self, request: CreateBookingRequest, actor: Actor) -> Booking:
        """
        Create a booking in pending/pending and reserve its seats.

        Args:
            request: Booking creation request
            actor: Customer making the booking

        Returns:
            Created booking

        Raises:
            ValidationError: If the passenger list does not match the passenger count
            NotFoundError: If the schedule does not exist or is not open for booking
            CapacityError: If the schedule has fewer seats left than requested
        """
        if len(request.passengers) != request.number_of_passengers:
            raise ValidationError(
                detail="Passenger details must be provided for every passenger",
                errors={
                    "number_of_passengers": request.number_of_passengers,
                    "passengers": len(request.passengers),
                },
            )
        if request.number_of_passengers > settings.max_passengers_per_booking:
            raise ValidationError(
                detail=f"A booking can carry at most {settings.max_passengers_per_booking} passengers",
                errors={"number_of_passengers": request.number_of_passengers},
            )

        stmt = (
            select(TripSchedule, Trip)
            .join(Trip, TripSchedule.trip_id == Trip.id)
            .where(TripSchedule.id == request.schedule_id)
        )
        row = (await self.db.execute(stmt)).one_or_none()
        if row is None or not row.Trip.is_active:
            raise NotFoundError(
                resource_type="trip schedule",
                resource_id=request.schedule_id,
                detail=f"Trip schedule {request.schedule_id} not found or not available for booking",
            )
        trip = row.Trip

        booking = Booking(
            customer_id=actor.user_id,
            trip_schedule_id=request.schedule_id,
            booking_reference=await self._unique_reference(),
            number_of_passengers=request.number_of_passengers,
            total_amount=trip.price_amount * request.number_of_passengers,
            currency=trip.price_currency or settings.default_currency,
            booking_status=BookingStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            payment_method=request.payment_method.value,
            special_requirements=request.special_requirements,
        )
        self.db.add(booking)
        await self.db.flush()

        try:
            counter = await self.ledger.reserve(
                request.schedule_id,
                request.number_of_passengers,
                booking_id=booking.id,
                actor_id=actor.user_id,
            )
        except ProblemDetailsException:
            # Undo the flushed row; the rest of the session stays usable
            await self.db.delete(booking)
            await self.db.flush()
            raise

        self.db.add_all(
            Passenger(
                booking_id=booking.id,
                first_name=passenger.first_name,
                last_name=passenger.last_name,
                age=passenger.age,
                emergency_contact=passenger.emergency_contact,
            )
            for passenger in request.passengers
        )
        self.db.add(
            Payment(
                booking_id=booking.id,
                amount=booking.total_amount,
                currency=booking.currency,
                payment_method=booking.payment_method,
                payment_status=PaymentRecordStatus.PENDING.value,
            )
        )

        await self.db.commit()

        metrics_collector.record_booking_created(booking.payment_method)
        logger.info(
            "Booking created successfully",
            extra={
                "booking_id": booking.id,
                "booking_reference": booking.booking_reference,
                "schedule_id": request.schedule_id,
                "customer_id": actor.user_id,
                "passengers": booking.number_of_passengers,
                "total_amount": booking.total_amount,
                "remaining_seats": counter.available_seats,
            }
        )

        await self._emit(
            notices.booking_created(actor.user_id, booking.booking_reference, booking.payment_method)
        )
        return booking

    async def confirm_booking(self, request: ConfirmBookingRequest, actor: Actor) -> Booking:
        """
        Staff confirmation of a pending booking. Payment status is left as is.

        Raises:
            AuthorizationError: If the actor is not staff
            NotFoundError: If the booking does not exist
            ConflictError: If the booking is not pending
        """
        actor.require_staff()
        booking = await self.get_booking(request.booking_id)
        assert_booking_transition(booking.booking_status, BookingStatus.CONFIRMED)

        await self._transition(
            booking,
            actor,
            BookingStatus.CONFIRMED,
            booking.payment_status,
            enforce_table=True,
        )
        await self.db.commit()

        logger.info(
            "Booking confirmed",
            extra={"booking_id": booking.id, "actor_id": actor.user_id}
        )

        await self._emit(
            notices.booking_confirmed(booking.customer_id, booking.booking_reference, booking.schedule.trip.title)
        )
        return booking

    async def cancel_booking(self, request: CancelBookingRequest, actor: Actor) -> Booking:
        """
        Cancel a booking and give its seats back.

        Customers may only cancel their own bookings, and only while the
        cancellation window is open. Staff may cancel any booking at any time.

        Raises:
            NotFoundError: If the booking does not exist
            AuthorizationError: If a non-staff actor does not own the booking
            PolicyViolationError: If a customer cancels inside the window
            ConflictError: If the booking is already cancelled or completed
        """
        booking = await self.get_booking(request.booking_id)
        self._require_owner_or_staff(booking, actor)

        assert_booking_transition(booking.booking_status, BookingStatus.CANCELLED)

        if not actor.is_staff:
            schedule = booking.schedule
            departure_at = departure_datetime(schedule.scheduled_date, schedule.departure_time, settings.tz)
            self.window.check_customer_cancellation(departure_at, self.clock())

        await self._transition(
            booking,
            actor,
            BookingStatus.CANCELLED,
            booking.payment_status,
            enforce_table=True,
        )
        await self.db.commit()

        metrics_collector.record_booking_cancelled(by_staff=actor.is_staff)
        logger.info(
            "Booking cancelled",
            extra={
                "booking_id": booking.id,
                "booking_reference": booking.booking_reference,
                "actor_id": actor.user_id,
                "actor_role": actor.role.value,
                "released_seats": booking.number_of_passengers,
            }
        )

        await self._emit(notices.booking_cancelled(booking.customer_id, booking.booking_reference))
        return booking

    async def pay_booking(self, request: PayBookingRequest, actor: Actor) -> PaymentOutcome:
        """
        Charge a booking through the payment gateway.

        A successful charge marks the payment paid and confirms a pending
        booking. A declined charge marks the payment failed; it can be retried.

        Raises:
            NotFoundError: If the booking does not exist
            AuthorizationError: If a non-staff actor does not own the booking
            ConflictError: If the booking is cancelled or already paid
        """
        booking = await self.get_booking(request.booking_id)
        self._require_owner_or_staff(booking, actor)

        if booking.booking_status == BookingStatus.CANCELLED:
            raise ConflictError(
                detail=f"Booking {booking.booking_reference} is cancelled and cannot be paid",
                conflicting_resource={"booking_status": BookingStatus.CANCELLED.value},
            )
        assert_payment_transition(booking.payment_status, PaymentStatus.PAID)

        result = await self.gateway.charge(
            amount=booking.total_amount,
            currency=booking.currency,
            reference=booking.booking_reference,
            payment_method=request.payment_method.value,
        )
        metrics_collector.record_payment(result.success)

        payment = self._ensure_payment(booking)
        payment.payment_method = request.payment_method.value

        if not result.success:
            await self._transition(
                booking,
                actor,
                booking.booking_status,
                PaymentStatus.FAILED,
                enforce_table=True,
            )
            await self.db.commit()

            logger.warning(
                "Payment declined",
                extra={
                    "booking_id": booking.id,
                    "gateway": self.gateway.name,
                    "error": result.error_message,
                }
            )
            await self._emit(
                notices.payment_failed(booking.customer_id, booking.booking_reference, result.error_message)
            )
            return PaymentOutcome(booking, False, error_message=result.error_message)

        target = BookingStatus.CONFIRMED if booking.booking_status == BookingStatus.PENDING else booking.booking_status
        amount = booking.total_amount
        try:
            await self._transition(booking, actor, target, PaymentStatus.PAID, enforce_table=True)
        except ConflictError:
            # Another request moved the booking between the charge and the write
            await self.db.rollback()
            await self.gateway.refund(
                transaction_id=result.transaction_id,
                amount=amount,
                reason="booking changed during payment",
            )
            raise

        payment.transaction_id = result.transaction_id
        payment.payment_date = datetime.utcnow()
        await self.db.commit()

        logger.info(
            "Payment processed successfully",
            extra={
                "booking_id": booking.id,
                "booking_reference": booking.booking_reference,
                "transaction_id": result.transaction_id,
                "amount": booking.total_amount,
                "currency": booking.currency,
            }
        )

        await self._emit(
            notices.payment_succeeded(booking.customer_id, booking.booking_reference, result.transaction_id)
        )
        return PaymentOutcome(booking, True, transaction_id=result.transaction_id)

    async def update_status(self, request: UpdateBookingStatusRequest, actor: Actor) -> Booking:
        """
        Staff override of a booking's (booking_status, payment_status) pair.

        Any pair may be set. Moving into ``cancelled`` releases the seats,
        moving out of ``cancelled`` reserves them again against the current
        capacity. Moving a paid payment to ``refunded`` refunds it through the
        gateway.

        Raises:
            AuthorizationError: If the actor is not staff
            NotFoundError: If the booking does not exist
            CapacityError: If a cancelled booking is reinstated on a full schedule
            ConflictError: If the booking changed concurrently or the refund was declined
        """
        actor.require_staff()
        booking = await self.get_booking(request.booking_id)

        previous_booking_status = booking.booking_status
        previous_payment_status = booking.payment_status
        if (previous_booking_status, previous_payment_status) == (request.booking_status, request.payment_status):
            return booking

        refund_transaction_id = None
        refund_amount = None
        if (
            request.payment_status == PaymentStatus.REFUNDED
            and previous_payment_status == PaymentStatus.PAID
            and booking.payment is not None
            and booking.payment.transaction_id
        ):
            refund_transaction_id = booking.payment.transaction_id
            refund_amount = booking.payment.amount
        booking_reference = booking.booking_reference

        await self._transition(
            booking,
            actor,
            request.booking_status,
            request.payment_status,
            enforce_table=False,
        )

        # Money only moves once the new state is written and still uncommitted
        if refund_transaction_id is not None:
            refund = await self.gateway.refund(
                transaction_id=refund_transaction_id,
                amount=refund_amount,
                reason=f"status override by user {actor.user_id}",
            )
            if not refund.success:
                await self.db.rollback()
                logger.warning(
                    "Refund declined during status override",
                    extra={"booking_reference": booking_reference, "error": refund.error_message},
                )
                raise ConflictError(
                    detail=f"Refund for booking {booking_reference} was declined",
                    conflicting_resource={"payment_status": previous_payment_status},
                )

        await self.db.commit()

        if request.booking_status == BookingStatus.CANCELLED and previous_booking_status != BookingStatus.CANCELLED:
            metrics_collector.record_booking_cancelled(by_staff=True)
        logger.info(
            "Booking status overridden",
            extra={
                "booking_id": booking.id,
                "actor_id": actor.user_id,
                "from_status": f"{previous_booking_status}/{previous_payment_status}",
                "to_status": f"{request.booking_status.value}/{request.payment_status.value}",
            }
        )

        await self._emit(
            notices.status_update_message(
                booking.customer_id,
                booking.booking_reference,
                booking.schedule.trip.title,
                request.booking_status,
                request.payment_status,
                previous_payment_status,
            )
        )
        return booking

    async def complete_departed(self, now: Optional[datetime] = None) -> int:
        """
        Close schedules whose sailing is over.

        Marks departed ``scheduled``/``confirmed`` schedules ``completed`` and
        moves their confirmed bookings to ``completed``.

        Returns:
            Number of bookings completed
        """
        now = now or self.clock()
        stmt = (
            select(TripSchedule)
            .options(selectinload(TripSchedule.trip))
            .where(
                TripSchedule.status.in_([status.value for status in ACTIVE_STATUSES]),
                TripSchedule.scheduled_date <= now.astimezone(settings.tz).date(),
            )
            .execution_options(populate_existing=True)
        )
        schedules = list((await self.db.execute(stmt)).scalars())

        completed = 0
        messages: list[NotificationMessage] = []
        for schedule in schedules:
            if self._sailing_end(schedule) > now:
                continue

            bookings = await self._confirmed_bookings(schedule.id)
            schedule_completed = 0
            for booking in bookings:
                try:
                    await self._transition(
                        booking,
                        None,
                        BookingStatus.COMPLETED,
                        booking.payment_status,
                        enforce_table=True,
                    )
                except ConflictError:
                    logger.warning(
                        "Booking changed while completing schedule, skipped",
                        extra={"booking_id": booking.id, "schedule_id": schedule.id}
                    )
                    continue
                completed += 1
                schedule_completed += 1
                messages.append(
                    notices.booking_completed(booking.customer_id, booking.booking_reference, schedule.trip.title)
                )

            schedule.status = ScheduleStatus.COMPLETED.value
            logger.info(
                "Schedule completed",
                extra={"schedule_id": schedule.id, "bookings_completed": schedule_completed}
            )

        await self.db.commit()

        if completed:
            metrics_collector.record_booking_completed(completed)
        await self._emit(*messages)
        return completed

    async def get_booking(self, booking_id: int) -> Booking:
        """Load a booking with its schedule, trip and payment, fresh from the database."""
        stmt = (
            select(Booking)
            .options(
                selectinload(Booking.schedule).selectinload(TripSchedule.trip),
                selectinload(Booking.payment),
            )
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        booking = (await self.db.execute(stmt)).scalar_one_or_none()
        if booking is None:
            raise NotFoundError(resource_type="booking", resource_id=booking_id)
        return booking

    async def _transition(
        self,
        booking: Booking,
        actor: Optional[Actor],
        booking_status: str,
        payment_status: str,
        enforce_table: bool,
    ) -> None:
        """
        Move a booking to a new (booking_status, payment_status) pair.

        The write is a compare-and-swap on the pair observed when the booking
        was loaded. Seats move whenever the booking crosses the cancelled
        boundary, in either direction. The caller commits.
        """
        previous_booking_status = BookingStatus(booking.booking_status)
        previous_payment_status = PaymentStatus(booking.payment_status)
        booking_status = BookingStatus(booking_status)
        payment_status = PaymentStatus(payment_status)

        if enforce_table:
            if booking_status != previous_booking_status:
                assert_booking_transition(previous_booking_status, booking_status)
            if payment_status != previous_payment_status:
                assert_payment_transition(previous_payment_status, payment_status)

        actor_id = actor.user_id if actor else None
        was_holding = previous_booking_status != BookingStatus.CANCELLED
        now_holding = booking_status != BookingStatus.CANCELLED

        # Seats first, so a full schedule rejects the reinstatement before anything is written
        if now_holding and not was_holding:
            await self.ledger.reserve(
                booking.trip_schedule_id,
                booking.number_of_passengers,
                booking_id=booking.id,
                actor_id=actor_id,
                reason=LedgerReason.REINSTATE,
                statuses=ACTIVE_STATUSES,
            )

        stmt = (
            update(Booking)
            .where(
                Booking.id == booking.id,
                Booking.booking_status == previous_booking_status.value,
                Booking.payment_status == previous_payment_status.value,
            )
            .values(booking_status=booking_status.value, payment_status=payment_status.value)
            .returning(Booking.id)
            .execution_options(synchronize_session=False)
        )
        if (await self.db.execute(stmt)).scalar_one_or_none() is None:
            raise ConflictError(
                detail=f"Booking {booking.booking_reference} was modified concurrently",
                conflicting_resource={"booking_id": booking.id},
            )

        if was_holding and not now_holding:
            await self.ledger.release(
                booking.trip_schedule_id,
                booking.number_of_passengers,
                booking_id=booking.id,
                actor_id=actor_id,
            )

        if payment_status != previous_payment_status:
            payment = self._ensure_payment(booking)
            payment.payment_status = payment_record_status_for(payment_status).value

        set_committed_value(booking, "booking_status", booking_status.value)
        set_committed_value(booking, "payment_status", payment_status.value)

    def _ensure_payment(self, booking: Booking) -> Payment:
        if booking.payment is None:
            payment = Payment(
                booking_id=booking.id,
                amount=booking.total_amount,
                currency=booking.currency,
                payment_method=booking.payment_method,
                payment_status=PaymentRecordStatus.PENDING.value,
            )
            self.db.add(payment)
            set_committed_value(booking, "payment", payment)
        return booking.payment

    async def _confirmed_bookings(self, schedule_id: int) -> list[Booking]:
        stmt = (
            select(Booking)
            .options(selectinload(Booking.payment))
            .where(
                Booking.trip_schedule_id == schedule_id,
                Booking.booking_status == BookingStatus.CONFIRMED.value,
            )
            .execution_options(populate_existing=True)
        )
        return list((await self.db.execute(stmt)).scalars())

    async def _unique_reference(self) -> str:
        for _ in range(MAX_REFERENCE_ATTEMPTS):
            reference = generate_booking_reference()
            stmt = select(Booking.id).where(Booking.booking_reference == reference)
            if (await self.db.execute(stmt)).scalar_one_or_none() is None:
                return reference
        raise ConflictError(detail="Could not allocate a unique booking reference, please retry")

    @staticmethod
    def _require_owner_or_staff(booking: Booking, actor: Actor) -> None:
        if not actor.is_staff and not actor.owns(booking.customer_id):
            raise AuthorizationError(detail="You can only act on your own bookings")

    @staticmethod
    def _sailing_end(schedule: TripSchedule) -> datetime:
        departure_at = departure_datetime(schedule.scheduled_date, schedule.departure_time, settings.tz)
        if schedule.return_time is not None:
            return_at = departure_datetime(schedule.scheduled_date, schedule.return_time, settings.tz)
            if return_at >= departure_at:
                return return_at
        return departure_at + timedelta(hours=schedule.trip.duration_hours)

    async def _emit(self, *messages: NotificationMessage) -> None:
        if self.notifier is not None:
            await self.notifier.emit(*messages)
