"""Models module exporting all database models."""

from .booking import (
    Booking,
    BookingStatus,
    Passenger,
    Payment,
    PaymentMethod,
    PaymentRecordStatus,
    PaymentStatus,
)
from .ledger import LedgerReason, SeatLedgerEntry
from .notification import Notification, NotificationType
from .trip import ScheduleStatus, Trip, TripSchedule
from .user import STAFF_ROLES, Boat, User, UserRole

__all__ = [
    # People and fleet
    "User",
    "UserRole",
    "STAFF_ROLES",
    "Boat",

    # Offerings
    "Trip",
    "TripSchedule",
    "ScheduleStatus",

    # Booking entities
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "PaymentMethod",
    "Passenger",
    "Payment",
    "PaymentRecordStatus",

    # Seat ledger
    "SeatLedgerEntry",
    "LedgerReason",

    # Messaging
    "Notification",
    "NotificationType",
]
