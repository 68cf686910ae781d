"""Booking and payment state machines."""

from ..core.exceptions import ConflictError
from ..models.booking import BookingStatus, PaymentRecordStatus, PaymentStatus

BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PAID, PaymentStatus.FAILED}),
    # A declined payment may be retried
    PaymentStatus.FAILED: frozenset({PaymentStatus.PAID, PaymentStatus.FAILED}),
    PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}

_RECORD_STATUS = {
    PaymentStatus.PENDING: PaymentRecordStatus.PENDING,
    PaymentStatus.PAID: PaymentRecordStatus.COMPLETED,
    PaymentStatus.FAILED: PaymentRecordStatus.FAILED,
    PaymentStatus.REFUNDED: PaymentRecordStatus.REFUNDED,
}


def assert_booking_transition(current: str, target: str) -> None:
    allowed = BOOKING_TRANSITIONS.get(BookingStatus(current), frozenset())
    if BookingStatus(target) not in allowed:
        raise ConflictError(
            detail=f"Invalid booking transition: {BookingStatus(current).value} -> {BookingStatus(target).value}",
            conflicting_resource={"booking_status": BookingStatus(current).value},
        )


def assert_payment_transition(current: str, target: str) -> None:
    allowed = PAYMENT_TRANSITIONS.get(PaymentStatus(current), frozenset())
    if PaymentStatus(target) not in allowed:
        raise ConflictError(
            detail=f"Invalid payment transition: {PaymentStatus(current).value} -> {PaymentStatus(target).value}",
            conflicting_resource={"payment_status": PaymentStatus(current).value},
        )


def payment_record_status_for(payment_status: str) -> PaymentRecordStatus:
    """Map a booking's payment status onto the status of its payment record."""
    return _RECORD_STATUS[PaymentStatus(payment_status)]
