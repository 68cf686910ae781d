"""Business logic services."""

from .booking_service import BookingService, PaymentOutcome
from .checkin_service import CheckInService
from .notification_service import NotificationEmitter, NotificationService
from .schedule_service import ScheduleService
from .seat_ledger import SeatLedger
from .trip_service import TripService

__all__ = [
    "BookingService",
    "PaymentOutcome",
    "CheckInService",
    "NotificationEmitter",
    "NotificationService",
    "ScheduleService",
    "SeatLedger",
    "TripService",
]
