"""Trip and schedule model definitions."""

from datetime import date, datetime, time
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .booking import Booking
    from .ledger import SeatLedgerEntry
    from .user import Boat, User


class ScheduleStatus(str, Enum):
    """Schedule lifecycle status."""
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Trip(Base):
    """Trip entity representing a boat tour offering."""

    __tablename__ = "trips"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Price per passenger in minor units (e.g., cents)
    price_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    price_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    duration_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    max_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    departure_location: Mapped[str] = mapped_column(String(255), nullable=False)
    return_location: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    created_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("price_amount >= 0", name="ck_trip_price_amount_non_negative"),
        CheckConstraint("length(price_currency) = 3", name="ck_trip_price_currency_length"),
        CheckConstraint("duration_hours > 0", name="ck_trip_duration_positive"),
        CheckConstraint("max_capacity > 0", name="ck_trip_max_capacity_positive"),
    )

    schedules: Mapped[list["TripSchedule"]] = relationship(
        "TripSchedule",
        back_populates="trip"
    )

    def __repr__(self) -> str:
        return f"<Trip(id={self.id}, title='{self.title}', active={self.is_active})>"


class TripSchedule(Base):
    """A single dated sailing of a trip, owning the seat counter."""

    __tablename__ = "trip_schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    trip_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("trips.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    departure_time: Mapped[time] = mapped_column(Time, nullable=False)
    return_time: Mapped[time | None] = mapped_column(Time, nullable=True)

    boat_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("boats.id", ondelete="SET NULL"),
        nullable=True
    )
    guide_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Seat ledger: only SeatLedger writes these two columns
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[ScheduleStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ScheduleStatus.SCHEDULED,
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("capacity >= 0", name="ck_schedule_capacity_non_negative"),
        CheckConstraint("available_seats >= 0", name="ck_schedule_available_seats_non_negative"),
        CheckConstraint("available_seats <= capacity", name="ck_schedule_available_lte_capacity"),
        CheckConstraint(
            "status IN ('scheduled', 'confirmed', 'cancelled', 'completed')",
            name="ck_schedule_status_valid"
        ),
    )

    trip: Mapped["Trip"] = relationship("Trip", back_populates="schedules")
    boat: Mapped["Boat | None"] = relationship("Boat")
    guide: Mapped["User | None"] = relationship("User")
    bookings: Mapped[list["Booking"]] = relationship(
        "Booking",
        back_populates="schedule",
        passive_deletes=True
    )
    ledger_entries: Mapped[list["SeatLedgerEntry"]] = relationship(
        "SeatLedgerEntry",
        back_populates="schedule",
        cascade="all, delete-orphan"
    )

    @property
    def booked_seats(self) -> int:
        return self.capacity - self.available_seats

    def __repr__(self) -> str:
        return (
            f"<TripSchedule(id={self.id}, trip_id={self.trip_id}, "
            f"date={self.scheduled_date}, seats={self.available_seats}/{self.capacity}, "
            f"status={self.status})>"
        )
