"""Schedule service: creating, changing and staffing trip schedules."""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.attributes import set_committed_value

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..domain.actor import Actor
from ..models.booking import Booking, BookingStatus
from ..models.trip import ScheduleStatus, TripSchedule
from ..models.user import Boat, User, UserRole
from ..schemas.schedule import (
    AssignScheduleRequest,
    CreateScheduleRequest,
    DeleteScheduleRequest,
    UpdateScheduleRequest,
)
from . import notification_service as notices
from .notification_service import NotificationEmitter
from .seat_ledger import SeatLedger
from .trip_service import TripService

logger = logging.getLogger(__name__)


class ScheduleService:
    """Service for trip schedule operations."""

    def __init__(self, db: AsyncSession, notifier: Optional[NotificationEmitter] = None):
        self.db = db
        self.ledger = SeatLedger(db)
        self.trip_service = TripService(db)
        self.notifier = notifier

    async def create_schedule(self, request: CreateScheduleRequest, actor: Actor) -> TripSchedule:
        """
        Create a schedule for an active trip with every seat available.

        Args:
            request: Schedule creation request
            actor: Admin creating the schedule

        Returns:
            Created schedule entity

        Raises:
            AuthorizationError: If the actor is not an admin
            NotFoundError: If the trip does not exist or is inactive
        """
        actor.require_roles(UserRole.ADMIN)

        trip = await self.trip_service.get_trip(request.trip_id)
        if not trip.is_active:
            raise NotFoundError(
                resource_type="trip",
                resource_id=request.trip_id,
                detail=f"Trip {request.trip_id} is inactive and cannot be scheduled",
            )

        capacity = request.capacity if request.capacity is not None else trip.max_capacity
        schedule = TripSchedule(
            trip_id=trip.id,
            scheduled_date=request.scheduled_date,
            departure_time=request.departure_time,
            return_time=request.return_time,
            capacity=capacity,
            available_seats=capacity,
            status=ScheduleStatus.SCHEDULED.value,
        )
        self.db.add(schedule)
        await self.db.flush()

        self.ledger.record_opening(schedule.id, capacity, actor_id=actor.user_id)
        await self.db.commit()

        logger.info(
            "Trip schedule created successfully",
            extra={
                "schedule_id": schedule.id,
                "trip_id": trip.id,
                "scheduled_date": schedule.scheduled_date.isoformat(),
                "capacity": capacity,
            }
        )
        return schedule

    async def update_schedule(self, request: UpdateScheduleRequest, actor: Actor) -> TripSchedule:
        """
        Update the fields present in the request.

        Capacity changes go through the seat ledger and keep the booked seats.

        Raises:
            AuthorizationError: If the actor is not an admin
            NotFoundError: If the schedule does not exist
            ConflictError: If the new capacity is below the booked seats, or the
                schedule would be cancelled while it still has active bookings
        """
        actor.require_roles(UserRole.ADMIN)
        schedule = await self.get_schedule(request.schedule_id)

        if request.status == ScheduleStatus.CANCELLED and schedule.status != ScheduleStatus.CANCELLED:
            active = await self._count_active_bookings(schedule.id)
            if active:
                raise ConflictError(
                    detail=f"Schedule {schedule.id} still has {active} active bookings",
                    conflicting_resource={"schedule_id": schedule.id, "active_bookings": active},
                )

        if request.capacity is not None and request.capacity != schedule.capacity:
            counter = await self.ledger.resize(schedule.id, request.capacity, actor_id=actor.user_id)
            set_committed_value(schedule, "capacity", counter.capacity)
            set_committed_value(schedule, "available_seats", counter.available_seats)

        changes = request.model_dump(
            exclude_unset=True,
            exclude_none=True,
            exclude={"schedule_id", "capacity"},
        )
        for field, value in changes.items():
            setattr(schedule, field, value.value if field == "status" else value)

        await self.db.commit()

        logger.info(
            "Trip schedule updated successfully",
            extra={
                "schedule_id": schedule.id,
                "fields": sorted(request.model_fields_set - {"schedule_id"}),
                "actor_id": actor.user_id,
            }
        )
        return schedule

    async def delete_schedule(self, request: DeleteScheduleRequest, actor: Actor) -> Optional[TripSchedule]:
        """
        Delete a schedule that no active booking references.

        A schedule that only carries cancelled bookings cannot be removed
        without losing booking history, so it is kept with status
        ``cancelled`` instead.

        Returns:
            None when the row was deleted, otherwise the kept schedule

        Raises:
            AuthorizationError: If the actor is not an admin
            NotFoundError: If the schedule does not exist
            ConflictError: If active bookings reference the schedule
        """
        actor.require_roles(UserRole.ADMIN)
        schedule = await self.get_schedule(request.schedule_id)

        active = await self._count_active_bookings(schedule.id)
        if active:
            raise ConflictError(
                detail="Cannot delete schedule with active bookings",
                conflicting_resource={"schedule_id": schedule.id, "active_bookings": active},
            )

        stmt = select(func.count(Booking.id)).where(Booking.trip_schedule_id == schedule.id)
        if (await self.db.execute(stmt)).scalar():
            schedule.status = ScheduleStatus.CANCELLED.value
            await self.db.commit()
            logger.info(
                "Trip schedule kept as cancelled - booking history exists",
                extra={"schedule_id": schedule.id, "actor_id": actor.user_id}
            )
            return schedule

        await self.db.delete(schedule)
        await self.db.commit()

        logger.info(
            "Trip schedule deleted",
            extra={"schedule_id": request.schedule_id, "actor_id": actor.user_id}
        )
        return None

    async def assign(self, request: AssignScheduleRequest, actor: Actor) -> TripSchedule:
        """
        Assign a boat and a guide to a schedule and mark it confirmed.

        The guide is notified of the assignment.

        Raises:
            AuthorizationError: If the actor is not admin or operations
            NotFoundError: If the schedule, boat or guide does not exist
            ValidationError: If the user is not an active guide
            ConflictError: If the schedule is closed or the boat is unavailable
        """
        actor.require_staff()
        schedule = await self.get_schedule(request.schedule_id)

        if schedule.status in (ScheduleStatus.CANCELLED, ScheduleStatus.COMPLETED):
            raise ConflictError(
                detail=f"Schedule {schedule.id} is {schedule.status} and cannot be assigned",
                conflicting_resource={"schedule_id": schedule.id, "status": schedule.status},
            )

        if request.boat_id is not None:
            boat = await self.db.get(Boat, request.boat_id)
            if boat is None:
                raise NotFoundError(resource_type="boat", resource_id=request.boat_id)
            if not boat.is_available:
                raise ConflictError(
                    detail=f"Boat '{boat.name}' is not available",
                    conflicting_resource={"boat_id": boat.id},
                )
            if boat.capacity < schedule.booked_seats:
                raise ConflictError(
                    detail=f"Boat '{boat.name}' seats {boat.capacity}, {schedule.booked_seats} seats are booked",
                    conflicting_resource={"boat_id": boat.id, "booked_seats": schedule.booked_seats},
                )

        if request.guide_id is not None:
            guide = await self.db.get(User, request.guide_id)
            if guide is None:
                raise NotFoundError(resource_type="user", resource_id=request.guide_id)
            if guide.role != UserRole.GUIDE or not guide.is_active:
                raise ValidationError(
                    detail=f"User {guide.id} is not an active guide",
                    errors={"guide_id": request.guide_id},
                )

        schedule.boat_id = request.boat_id
        schedule.guide_id = request.guide_id
        schedule.status = ScheduleStatus.CONFIRMED.value
        await self.db.commit()

        logger.info(
            "Schedule assignment updated",
            extra={
                "schedule_id": schedule.id,
                "boat_id": request.boat_id,
                "guide_id": request.guide_id,
                "actor_id": actor.user_id,
            }
        )

        if request.guide_id is not None and self.notifier is not None:
            await self.notifier.emit(
                notices.guide_assigned(
                    request.guide_id,
                    schedule.trip.title,
                    schedule.scheduled_date,
                    schedule.departure_time,
                )
            )
        return schedule

    async def get_schedule(self, schedule_id: int) -> TripSchedule:
        """Load a schedule and its trip fresh from the database."""
        stmt = (
            select(TripSchedule)
            .options(selectinload(TripSchedule.trip))
            .where(TripSchedule.id == schedule_id)
            .execution_options(populate_existing=True)
        )
        schedule = (await self.db.execute(stmt)).scalar_one_or_none()
        if schedule is None:
            raise NotFoundError(resource_type="trip schedule", resource_id=schedule_id)
        return schedule

    async def _count_active_bookings(self, schedule_id: int) -> int:
        stmt = select(func.count(Booking.id)).where(
            Booking.trip_schedule_id == schedule_id,
            Booking.booking_status != BookingStatus.CANCELLED.value,
        )
        return (await self.db.execute(stmt)).scalar() or 0
