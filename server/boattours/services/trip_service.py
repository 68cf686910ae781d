"""Trip service for business logic operations."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError
from ..domain.actor import Actor
from ..models.trip import Trip
from ..models.user import UserRole
from ..schemas.trip import CreateTripRequest, DeactivateTripRequest, UpdateTripRequest

logger = logging.getLogger(__name__)


class TripService:
    """Service for trip-related operations. All writes are admin only."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_trip(self, request: CreateTripRequest, actor: Actor) -> Trip:
        """
        Create a new trip.

        Args:
            request: Trip creation request
            actor: Admin creating the trip

        Returns:
            Created trip entity

        Raises:
            AuthorizationError: If the actor is not an admin
        """
        actor.require_roles(UserRole.ADMIN)

        trip = Trip(
            title=request.title,
            description=request.description,
            price_amount=request.price.amount,
            price_currency=request.price.currency,
            duration_hours=request.duration_hours,
            max_capacity=request.max_capacity,
            departure_location=request.departure_location,
            return_location=request.return_location,
            is_active=True,
            created_by=actor.user_id,
        )

        try:
            self.db.add(trip)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Trip creation failed - integrity error",
                extra={"title": request.title, "error": str(e)}
            )
            raise ConflictError(detail="Trip could not be created") from e

        logger.info(
            "Trip created successfully",
            extra={"trip_id": trip.id, "title": trip.title, "actor_id": actor.user_id}
        )
        return trip

    async def update_trip(self, request: UpdateTripRequest, actor: Actor) -> Trip:
        """
        Update the fields present in the request. Existing schedules keep their capacity.

        Raises:
            AuthorizationError: If the actor is not an admin
            NotFoundError: If the trip does not exist
        """
        actor.require_roles(UserRole.ADMIN)
        trip = await self.get_trip(request.trip_id)

        changes = request.model_dump(exclude_unset=True, exclude_none=True, exclude={"trip_id", "price"})
        for field, value in changes.items():
            setattr(trip, field, value)
        if request.price is not None:
            trip.price_amount = request.price.amount
            trip.price_currency = request.price.currency

        await self.db.commit()

        logger.info(
            "Trip updated successfully",
            extra={
                "trip_id": trip.id,
                "fields": sorted(request.model_fields_set - {"trip_id"}),
                "actor_id": actor.user_id,
            }
        )
        return trip

    async def deactivate_trip(self, request: DeactivateTripRequest, actor: Actor) -> Trip:
        """
        Deactivate a trip. Trips are never deleted; inactive trips cannot be booked.

        Raises:
            AuthorizationError: If the actor is not an admin
            NotFoundError: If the trip does not exist
        """
        actor.require_roles(UserRole.ADMIN)
        trip = await self.get_trip(request.trip_id)

        trip.is_active = False
        await self.db.commit()

        logger.info(
            "Trip deactivated",
            extra={"trip_id": trip.id, "actor_id": actor.user_id}
        )
        return trip

    async def get_trip(self, trip_id: int) -> Trip:
        """Get trip by ID or raise NotFoundError."""
        stmt = select(Trip).where(Trip.id == trip_id)
        trip = (await self.db.execute(stmt)).scalar_one_or_none()
        if trip is None:
            raise NotFoundError(resource_type="trip", resource_id=trip_id)
        return trip
