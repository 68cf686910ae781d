"""Pure booking rules: transitions, cancellation window, acting identity."""

from .actor import Actor
from .booking_state import (
    BOOKING_TRANSITIONS,
    PAYMENT_TRANSITIONS,
    assert_booking_transition,
    assert_payment_transition,
    payment_record_status_for,
)
from .cancellation_policy import CancellationWindow, departure_datetime

__all__ = [
    "Actor",
    "BOOKING_TRANSITIONS",
    "PAYMENT_TRANSITIONS",
    "assert_booking_transition",
    "assert_payment_transition",
    "payment_record_status_for",
    "CancellationWindow",
    "departure_datetime",
]
