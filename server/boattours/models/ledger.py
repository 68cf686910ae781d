"""Seat ledger entry model definition."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .trip import TripSchedule


class LedgerReason(str, Enum):
    """Why the seat counter moved."""
    RESERVE = "reserve"
    RELEASE = "release"
    REINSTATE = "reinstate"
    RESIZE = "resize"


class SeatLedgerEntry(Base):
    """Audit record of a single change to a schedule's seat counter."""

    __tablename__ = "seat_ledger_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    schedule_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("trip_schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    booking_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("bookings.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    reason: Mapped[LedgerReason] = mapped_column(String(20), nullable=False)

    # Signed change to available_seats (capacity change for resize)
    delta: Mapped[int] = mapped_column(Integer, nullable=False)
    available_after: Mapped[int] = mapped_column(Integer, nullable=False)
    capacity_after: Mapped[int] = mapped_column(Integer, nullable=False)

    actor_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        server_default=func.now(),
        index=True
    )

    __table_args__ = (
        CheckConstraint("available_after >= 0", name="ck_ledger_available_after_non_negative"),
        CheckConstraint("available_after <= capacity_after", name="ck_ledger_available_lte_capacity"),
        CheckConstraint(
            "reason IN ('reserve', 'release', 'reinstate', 'resize')",
            name="ck_ledger_reason_valid"
        ),
    )

    schedule: Mapped["TripSchedule"] = relationship("TripSchedule", back_populates="ledger_entries")

    def __repr__(self) -> str:
        return (
            f"<SeatLedgerEntry(id={self.id}, schedule_id={self.schedule_id}, reason={self.reason}, "
            f"delta={self.delta}, available_after={self.available_after})>"
        )
