"""Trip router for trip management."""

import logging

from fastapi import APIRouter, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import CurrentActor, DatabaseSession
from ..domain.actor import Actor
from ..schemas.common import Money, problem_responses
from ..schemas.trip import CreateTripRequest, DeactivateTripRequest, Trip, UpdateTripRequest
from ..services.trip_service import TripService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/trip", tags=["trip"], responses=problem_responses(401, 403, 404, 422))


def _convert_trip_to_schema(trip_model) -> Trip:
    """Convert trip model to schema."""
    return Trip(
        id=trip_model.id,
        title=trip_model.title,
        description=trip_model.description,
        price=Money(amount=trip_model.price_amount, currency=trip_model.price_currency),
        duration_hours=trip_model.duration_hours,
        max_capacity=trip_model.max_capacity,
        departure_location=trip_model.departure_location,
        return_location=trip_model.return_location,
        is_active=trip_model.is_active,
        created_at=trip_model.created_at,
    )


@router.post("/create", response_model=Trip, status_code=status.HTTP_201_CREATED)
async def create_trip(
    request: CreateTripRequest,
    actor: Actor = CurrentActor,
    db: AsyncSession = DatabaseSession,
) -> Trip:
    """Create a new trip (admin)."""
    trip = await TripService(db).create_trip(request, actor)
    return _convert_trip_to_schema(trip)


@router.post("/update", response_model=Trip)
async def update_trip(
    request: UpdateTripRequest,
    actor: Actor = CurrentActor,
    db: AsyncSession = DatabaseSession,
) -> Trip:
    """Update a trip (admin)."""
    trip = await TripService(db).update_trip(request, actor)
    return _convert_trip_to_schema(trip)


@router.post("/deactivate", response_model=Trip)
async def deactivate_trip(
    request: DeactivateTripRequest,
    actor: Actor = CurrentActor,
    db: AsyncSession = DatabaseSession,
) -> Trip:
    """Deactivate a trip so it can no longer be scheduled or booked (admin)."""
    trip = await TripService(db).deactivate_trip(request, actor)
    return _convert_trip_to_schema(trip)
