"""Booking, passenger and payment model definitions."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .trip import TripSchedule
    from .user import User


class BookingStatus(str, Enum):
    """Booking status enumeration."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Payment status of a booking."""
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"


class PaymentMethod(str, Enum):
    """How the customer pays."""
    ONLINE = "online"
    CASH = "cash"


class PaymentRecordStatus(str, Enum):
    """Status of the payment record itself."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class Booking(Base):
    """A customer's reservation of passenger seats on a schedule."""

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    customer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    trip_schedule_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("trip_schedules.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    booking_reference: Mapped[str] = mapped_column(String(16), nullable=False, unique=True, index=True)
    number_of_passengers: Mapped[int] = mapped_column(Integer, nullable=False)

    # Fixed at creation: price per passenger x passengers, minor units
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    booking_status: Mapped[BookingStatus] = mapped_column(
        String(20),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(String(20), nullable=False)

    special_requirements: Mapped[str | None] = mapped_column(Text, nullable=True)
    checked_in: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

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
        CheckConstraint("number_of_passengers > 0", name="ck_booking_passengers_positive"),
        CheckConstraint("total_amount >= 0", name="ck_booking_total_amount_non_negative"),
        CheckConstraint(
            "booking_status IN ('pending', 'confirmed', 'completed', 'cancelled')",
            name="ck_booking_status_valid"
        ),
        CheckConstraint(
            "payment_status IN ('pending', 'paid', 'refunded', 'failed')",
            name="ck_booking_payment_status_valid"
        ),
        CheckConstraint("payment_method IN ('online', 'cash')", name="ck_booking_payment_method_valid"),
    )

    customer: Mapped["User"] = relationship("User")
    schedule: Mapped["TripSchedule"] = relationship("TripSchedule", back_populates="bookings")
    passengers: Mapped[list["Passenger"]] = relationship(
        "Passenger",
        back_populates="booking",
        cascade="all, delete-orphan"
    )
    payment: Mapped["Payment"] = relationship(
        "Payment",
        back_populates="booking",
        cascade="all, delete-orphan",
        uselist=False
    )

    @property
    def holds_seats(self) -> bool:
        """Whether this booking currently counts against the schedule's seats."""
        return self.booking_status != BookingStatus.CANCELLED

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, reference='{self.booking_reference}', "
            f"passengers={self.number_of_passengers}, status={self.booking_status}/{self.payment_status})>"
        )


class Passenger(Base):
    """Passenger travelling on a booking."""

    __tablename__ = "passengers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    emergency_contact: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        CheckConstraint("age IS NULL OR age >= 0", name="ck_passenger_age_non_negative"),
    )

    booking: Mapped["Booking"] = relationship("Booking", back_populates="passengers")

    def __repr__(self) -> str:
        return f"<Passenger(id={self.id}, booking_id={self.booking_id}, name='{self.first_name} {self.last_name}')>"


class Payment(Base):
    """Payment record, one per booking."""

    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True
    )

    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    payment_method: Mapped[PaymentMethod] = mapped_column(String(20), nullable=False)
    payment_status: Mapped[PaymentRecordStatus] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentRecordStatus.PENDING
    )
    transaction_id: Mapped[str | None] = mapped_column(String(64), nullable=True, unique=True)
    payment_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payment_amount_non_negative"),
        CheckConstraint(
            "payment_status IN ('pending', 'completed', 'failed', 'refunded')",
            name="ck_payment_status_valid"
        ),
    )

    booking: Mapped["Booking"] = relationship("Booking", back_populates="payment")

    def __repr__(self) -> str:
        return (
            f"<Payment(id={self.id}, booking_id={self.booking_id}, amount={self.amount}, "
            f"status={self.payment_status}, transaction_id={self.transaction_id})>"
        )
