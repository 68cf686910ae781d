"""Trip-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from .common import Money


class CreateTripRequest(BaseModel):
    """Request schema for creating a trip."""

    title: str = Field(..., min_length=1, max_length=255, description="Trip title")
    description: str | None = Field(None, description="Trip description")
    price: Money = Field(..., description="Price per passenger")
    duration_hours: int = Field(..., ge=1, le=72, description="Sailing duration in hours")
    max_capacity: int = Field(..., ge=1, le=1000, description="Default seats per schedule")
    departure_location: str = Field(..., min_length=1, max_length=255, description="Where the boat leaves from")
    return_location: str = Field(..., min_length=1, max_length=255, description="Where the boat comes back to")


class UpdateTripRequest(BaseModel):
    """Request schema for updating a trip. Omitted fields are left unchanged."""

    trip_id: int = Field(..., ge=1, description="Trip to update")
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    price: Money | None = None
    duration_hours: int | None = Field(None, ge=1, le=72)
    max_capacity: int | None = Field(None, ge=1, le=1000)
    departure_location: str | None = Field(None, min_length=1, max_length=255)
    return_location: str | None = Field(None, min_length=1, max_length=255)


class DeactivateTripRequest(BaseModel):
    """Request schema for deactivating a trip."""

    trip_id: int = Field(..., ge=1, description="Trip to deactivate")


class Trip(BaseModel):
    """Trip response schema."""

    id: int = Field(..., description="Unique trip ID")
    title: str = Field(..., description="Trip title")
    description: str | None = Field(None, description="Trip description")
    price: Money = Field(..., description="Price per passenger")
    duration_hours: int = Field(..., description="Sailing duration in hours")
    max_capacity: int = Field(..., description="Default seats per schedule")
    departure_location: str = Field(..., description="Where the boat leaves from")
    return_location: str = Field(..., description="Where the boat comes back to")
    is_active: bool = Field(..., description="Whether the trip can be scheduled and booked")
    created_at: datetime = Field(..., description="Creation time (ISO 8601)")
