"""Booking-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from ..models.booking import BookingStatus, PaymentMethod, PaymentStatus


class PassengerIn(BaseModel):
    """Passenger travelling on a new booking."""

    first_name: str = Field(..., min_length=1, max_length=100, description="Passenger first name")
    last_name: str = Field(..., min_length=1, max_length=100, description="Passenger last name")
    age: int | None = Field(None, ge=0, le=130, description="Passenger age")
    emergency_contact: str | None = Field(None, max_length=255, description="Emergency contact")


class CreateBookingRequest(BaseModel):
    """Request schema for creating a booking."""

    schedule_id: int = Field(..., ge=1, description="Trip schedule to book")
    number_of_passengers: int = Field(..., ge=1, description="Seats to reserve")
    passengers: list[PassengerIn] = Field(..., min_length=1, description="Passenger details")
    payment_method: PaymentMethod = Field(..., description="How the booking will be paid")
    special_requirements: str | None = Field(None, max_length=2000, description="Free-text notes")


class CreateBookingResponse(BaseModel):
    """Response schema for a created booking."""

    booking_id: int = Field(..., description="Unique booking ID")
    booking_reference: str = Field(..., description="Human-readable booking reference")
    total_amount: int = Field(..., ge=0, description="Total in minor units")
    currency: str = Field(..., description="ISO 4217 currency code")
    payment_method: PaymentMethod = Field(..., description="Payment method")


class BookingIdRequest(BaseModel):
    """Request schema for operations addressing a single booking."""

    booking_id: int = Field(..., ge=1, description="Booking to act on")


class ConfirmBookingRequest(BookingIdRequest):
    """Request schema for a staff confirmation."""


class CancelBookingRequest(BookingIdRequest):
    """Request schema for cancelling a booking."""


class PayBookingRequest(BookingIdRequest):
    """Request schema for paying a booking."""

    payment_method: PaymentMethod = Field(..., description="Payment method used for this payment")


class PayBookingResponse(BaseModel):
    """Response schema for a payment attempt."""

    booking_id: int = Field(..., description="Paid booking")
    payment_status: PaymentStatus = Field(..., description="Payment status after the attempt")
    transaction_id: str | None = Field(None, description="Gateway transaction ID")
    amount: int = Field(..., ge=0, description="Amount charged in minor units")
    currency: str = Field(..., description="ISO 4217 currency code")


class UpdateBookingStatusRequest(BookingIdRequest):
    """Request schema for a staff status override."""

    booking_status: BookingStatus = Field(..., description="Target booking status")
    payment_status: PaymentStatus = Field(..., description="Target payment status")


class CheckIn(BaseModel):
    """Check-in flag for one booking."""

    booking_id: int = Field(..., ge=1, description="Booking on the schedule")
    checked_in: bool = Field(..., description="Whether the party has boarded")


class CheckInRequest(BaseModel):
    """Request schema for a guide check-in."""

    schedule_id: int = Field(..., ge=1, description="Schedule being boarded")
    checkins: list[CheckIn] = Field(..., min_length=1, description="Check-in flags")


class CheckInResponse(BaseModel):
    """Response schema for a guide check-in."""

    schedule_id: int = Field(..., description="Schedule being boarded")
    updated: int = Field(..., ge=0, description="Bookings updated")


class Booking(BaseModel):
    """Booking response schema."""

    id: int = Field(..., description="Unique booking ID")
    booking_reference: str = Field(..., description="Human-readable booking reference")
    customer_id: int = Field(..., description="Owning customer")
    trip_schedule_id: int = Field(..., description="Booked schedule")
    number_of_passengers: int = Field(..., ge=1, description="Seats reserved")
    total_amount: int = Field(..., ge=0, description="Total in minor units")
    currency: str = Field(..., description="ISO 4217 currency code")
    booking_status: BookingStatus = Field(..., description="Booking status")
    payment_status: PaymentStatus = Field(..., description="Payment status")
    payment_method: PaymentMethod = Field(..., description="Payment method")
    checked_in: bool = Field(..., description="Whether the party has boarded")
    created_at: datetime = Field(..., description="Booking creation time (ISO 8601)")

    class Config:
        from_attributes = True
