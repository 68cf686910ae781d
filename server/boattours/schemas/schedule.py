"""Schedule-related Pydantic schemas."""

from datetime import date, time

from pydantic import BaseModel, Field

from ..models.trip import ScheduleStatus


class CreateScheduleRequest(BaseModel):
    """Request schema for creating a trip schedule."""

    trip_id: int = Field(..., ge=1, description="Trip being scheduled")
    scheduled_date: date = Field(..., description="Sailing date in operator local time")
    departure_time: time = Field(..., description="Departure time in operator local time")
    return_time: time | None = Field(None, description="Expected return time")
    capacity: int | None = Field(None, ge=1, le=1000, description="Seats, defaults to the trip's max capacity")


class UpdateScheduleRequest(BaseModel):
    """Request schema for updating a trip schedule. Omitted fields are left unchanged."""

    schedule_id: int = Field(..., ge=1, description="Schedule to update")
    scheduled_date: date | None = None
    departure_time: time | None = None
    return_time: time | None = None
    capacity: int | None = Field(None, ge=0, le=1000, description="New capacity, booked seats are kept")
    status: ScheduleStatus | None = None


class DeleteScheduleRequest(BaseModel):
    """Request schema for deleting a trip schedule."""

    schedule_id: int = Field(..., ge=1, description="Schedule to delete")


class AssignScheduleRequest(BaseModel):
    """Request schema for assigning a boat and guide to a schedule."""

    schedule_id: int = Field(..., ge=1, description="Schedule to staff")
    boat_id: int | None = Field(None, ge=1, description="Boat to assign")
    guide_id: int | None = Field(None, ge=1, description="Guide to assign")


class DeleteScheduleResponse(BaseModel):
    """Response schema for a schedule deletion."""

    schedule_id: int = Field(..., description="Deleted schedule")
    deleted: bool = Field(..., description="False when the schedule was kept as cancelled")
    status: ScheduleStatus | None = Field(None, description="Status of a kept schedule")


class Schedule(BaseModel):
    """Trip schedule response schema."""

    id: int = Field(..., description="Unique schedule ID")
    trip_id: int = Field(..., description="Scheduled trip")
    scheduled_date: date = Field(..., description="Sailing date")
    departure_time: time = Field(..., description="Departure time")
    return_time: time | None = Field(None, description="Expected return time")
    boat_id: int | None = Field(None, description="Assigned boat")
    guide_id: int | None = Field(None, description="Assigned guide")
    capacity: int = Field(..., ge=0, description="Total seats")
    available_seats: int = Field(..., ge=0, description="Seats left")
    status: ScheduleStatus = Field(..., description="Schedule status")

    class Config:
        from_attributes = True
