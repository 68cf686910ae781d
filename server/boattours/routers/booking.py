"""Booking router for booking lifecycle operations."""

import logging

from fastapi import APIRouter, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import CurrentActor, DatabaseSession, Gateway, Notifier
from ..domain.actor import Actor
from ..gateways.base import PaymentGateway
from ..schemas.booking import (
    Booking,
    CancelBookingRequest,
    CheckInRequest,
    CheckInResponse,
    ConfirmBookingRequest,
    CreateBookingRequest,
    CreateBookingResponse,
    PayBookingRequest,
    PayBookingResponse,
    UpdateBookingStatusRequest,
)
from ..schemas.common import problem_responses
from ..services.booking_service import BookingService
from ..services.checkin_service import CheckInService
from ..services.notification_service import NotificationEmitter

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/v1/booking",
    tags=["booking"],
    responses=problem_responses(400, 401, 403, 404, 409, 422),
)


def _convert_booking_to_schema(booking_model) -> Booking:
    """Convert booking model to schema."""
    return Booking.model_validate(booking_model)


@router.post("/create", response_model=CreateBookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: CreateBookingRequest,
    actor: Actor = CurrentActor,
    db: AsyncSession = DatabaseSession,
    notifier: NotificationEmitter = Notifier,
) -> CreateBookingResponse:
    """
    Reserve seats on a schedule and open a pending booking.

    Fails with 404 when the schedule is not open for booking and 409 (code
    FULL) when not enough seats are left.
    """
    booking = await BookingService(db, notifier=notifier).create_booking(request, actor)

    return CreateBookingResponse(
        booking_id=booking.id,
        booking_reference=booking.booking_reference,
        total_amount=booking.total_amount,
        currency=booking.currency,
        payment_method=booking.payment_method,
    )


@router.post("/confirm", response_model=Booking)
async def confirm_booking(
    request: ConfirmBookingRequest,
    actor: Actor = CurrentActor,
    db: AsyncSession = DatabaseSession,
    notifier: NotificationEmitter = Notifier,
) -> Booking:
    """Staff confirmation of a pending booking."""
    booking = await BookingService(db, notifier=notifier).confirm_booking(request, actor)
    return _convert_booking_to_schema(booking)


@router.post("/cancel", response_model=Booking)
async def cancel_booking(
    request: CancelBookingRequest,
    actor: Actor = CurrentActor,
    db: AsyncSession = DatabaseSession,
    notifier: NotificationEmitter = Notifier,
) -> Booking:
    """
    Cancel a booking and release its seats.

    Customers get 400 (code CANCELLATION_WINDOW) inside the cancellation
    window; staff may cancel at any time.
    """
    booking = await BookingService(db, notifier=notifier).cancel_booking(request, actor)
    return _convert_booking_to_schema(booking)


@router.post("/pay", response_model=PayBookingResponse)
async def pay_booking(
    request: PayBookingRequest,
    actor: Actor = CurrentActor,
    db: AsyncSession = DatabaseSession,
    notifier: NotificationEmitter = Notifier,
    gateway: PaymentGateway = Gateway,
) -> PayBookingResponse:
    """
    Charge a booking.

    A declined charge is reported with ``payment_status`` ``failed`` and no
    transaction id; paying an already paid booking is a 409.
    """
    outcome = await BookingService(db, notifier=notifier, gateway=gateway).pay_booking(request, actor)

    return PayBookingResponse(
        booking_id=outcome.booking.id,
        payment_status=outcome.booking.payment_status,
        transaction_id=outcome.transaction_id,
        amount=outcome.booking.total_amount,
        currency=outcome.booking.currency,
    )


@router.post("/update-status", response_model=Booking)
async def update_booking_status(
    request: UpdateBookingStatusRequest,
    actor: Actor = CurrentActor,
    db: AsyncSession = DatabaseSession,
    notifier: NotificationEmitter = Notifier,
    gateway: PaymentGateway = Gateway,
) -> Booking:
    """Staff override of a booking's booking and payment status."""
    booking = await BookingService(db, notifier=notifier, gateway=gateway).update_status(request, actor)
    return _convert_booking_to_schema(booking)


@router.post("/check-in", response_model=CheckInResponse)
async def check_in(
    request: CheckInRequest,
    actor: Actor = CurrentActor,
    db: AsyncSession = DatabaseSession,
) -> CheckInResponse:
    """Guide check-in of bookings on an assigned schedule."""
    updated = await CheckInService(db).check_in(request, actor)
    return CheckInResponse(schedule_id=request.schedule_id, updated=updated)
