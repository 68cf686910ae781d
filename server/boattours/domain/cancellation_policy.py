"""Cancellation window policy.

Customers may cancel their own booking only while the departure is at least
``window`` away. Staff cancellations are never subject to the window.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from ..core.exceptions import PolicyViolationError


def departure_datetime(
    scheduled_date: date,
    departure_time: time,
    tz: Optional[tzinfo] = None,
) -> datetime:
    """Departure timestamp of a schedule, attached to the operator timezone when given."""
    return datetime.combine(scheduled_date, departure_time, tzinfo=tz)


@dataclass(frozen=True)
class CancellationWindow:
    """Cut-off before departure after which customers cannot self-cancel."""

    window: timedelta = timedelta(hours=24)

    @classmethod
    def of_hours(cls, hours: int) -> "CancellationWindow":
        return cls(window=timedelta(hours=hours))

    @property
    def hours(self) -> int:
        return int(self.window.total_seconds() // 3600)

    def is_open(self, departure_at: datetime, now: datetime) -> bool:
        """True while a customer may still cancel (exactly ``window`` ahead is allowed)."""
        return departure_at - now >= self.window

    def check_customer_cancellation(self, departure_at: datetime, now: datetime) -> None:
        """
        Enforce the window for a customer-initiated cancellation.

        Raises:
            PolicyViolationError: If less than ``window`` remains before departure
        """
        if not self.is_open(departure_at, now):
            raise PolicyViolationError(departure_at=departure_at, window_hours=self.hours)
