"""Guide check-in of passengers boarding a schedule."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ..domain.actor import Actor
from ..models.booking import Booking, BookingStatus
from ..models.trip import TripSchedule
from ..models.user import UserRole
from ..schemas.booking import CheckInRequest

logger = logging.getLogger(__name__)


class CheckInService:
    """Service for boarding operations performed by the assigned guide."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def check_in(self, request: CheckInRequest, actor: Actor) -> int:
        """
        Set the checked-in flag of bookings on a schedule.

        The whole request is validated before any flag changes.

        Returns:
            Number of bookings updated

        Raises:
            AuthorizationError: If the actor is not the guide assigned to the schedule
            NotFoundError: If the schedule, or a booking on it, does not exist
            ConflictError: If a booking is cancelled
        """
        actor.require_roles(UserRole.GUIDE)

        schedule = await self.db.get(TripSchedule, request.schedule_id)
        if schedule is None:
            raise NotFoundError(resource_type="trip schedule", resource_id=request.schedule_id)
        if schedule.guide_id != actor.user_id:
            raise AuthorizationError(detail=f"You are not the guide assigned to schedule {schedule.id}")

        booking_ids = {item.booking_id for item in request.checkins}
        stmt = select(Booking).where(
            Booking.id.in_(booking_ids),
            Booking.trip_schedule_id == schedule.id,
        )
        bookings = {booking.id: booking for booking in (await self.db.execute(stmt)).scalars()}

        missing = sorted(booking_ids - bookings.keys())
        if missing:
            raise NotFoundError(
                resource_type="booking",
                resource_id=missing[0],
                detail=f"Bookings {missing} are not on schedule {schedule.id}",
            )

        cancelled = sorted(
            booking.id for booking in bookings.values()
            if booking.booking_status == BookingStatus.CANCELLED
        )
        if cancelled:
            raise ConflictError(
                detail=f"Cancelled bookings cannot be checked in: {cancelled}",
                conflicting_resource={"booking_ids": cancelled},
            )

        for item in request.checkins:
            bookings[item.booking_id].checked_in = item.checked_in

        await self.db.commit()

        logger.info(
            "Check-in status updated",
            extra={
                "schedule_id": schedule.id,
                "guide_id": actor.user_id,
                "bookings": len(bookings),
                "checked_in": sum(1 for item in request.checkins if item.checked_in),
            }
        )
        return len(bookings)
