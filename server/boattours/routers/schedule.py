"""Schedule router for schedule management and staffing."""

import logging

from fastapi import APIRouter, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import CurrentActor, DatabaseSession, Notifier
from ..domain.actor import Actor
from ..schemas.common import problem_responses
from ..schemas.schedule import (
    AssignScheduleRequest,
    CreateScheduleRequest,
    DeleteScheduleRequest,
    DeleteScheduleResponse,
    Schedule,
    UpdateScheduleRequest,
)
from ..services.notification_service import NotificationEmitter
from ..services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/v1/schedule",
    tags=["schedule"],
    responses=problem_responses(400, 401, 403, 404, 409, 422),
)


@router.post("/create", response_model=Schedule, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    request: CreateScheduleRequest,
    actor: Actor = CurrentActor,
    db: AsyncSession = DatabaseSession,
) -> Schedule:
    """Create a schedule for a trip (admin)."""
    schedule = await ScheduleService(db).create_schedule(request, actor)
    return Schedule.model_validate(schedule)


@router.post("/update", response_model=Schedule)
async def update_schedule(
    request: UpdateScheduleRequest,
    actor: Actor = CurrentActor,
    db: AsyncSession = DatabaseSession,
) -> Schedule:
    """Update a schedule's times, status or capacity (admin)."""
    schedule = await ScheduleService(db).update_schedule(request, actor)
    return Schedule.model_validate(schedule)


@router.post("/delete", response_model=DeleteScheduleResponse)
async def delete_schedule(
    request: DeleteScheduleRequest,
    actor: Actor = CurrentActor,
    db: AsyncSession = DatabaseSession,
) -> DeleteScheduleResponse:
    """
    Delete a schedule without active bookings (admin).

    Schedules that carry cancelled bookings are kept with status
    ``cancelled``; ``deleted`` is false in that case.
    """
    kept = await ScheduleService(db).delete_schedule(request, actor)
    if kept is None:
        return DeleteScheduleResponse(schedule_id=request.schedule_id, deleted=True)

    logger.debug(
        "Schedule retained instead of deleted",
        extra={"schedule_id": kept.id, "status": kept.status}
    )
    return DeleteScheduleResponse(schedule_id=kept.id, deleted=False, status=kept.status)


@router.post("/assign", response_model=Schedule)
async def assign_schedule(
    request: AssignScheduleRequest,
    actor: Actor = CurrentActor,
    db: AsyncSession = DatabaseSession,
    notifier: NotificationEmitter = Notifier,
) -> Schedule:
    """Assign a boat and guide to a schedule (admin, operations)."""
    schedule = await ScheduleService(db, notifier=notifier).assign(request, actor)
    return Schedule.model_validate(schedule)
