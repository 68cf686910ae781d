"""Notification router."""

from fastapi import APIRouter
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import CurrentActor, DatabaseSession
from ..domain.actor import Actor
from ..schemas.common import problem_responses
from ..schemas.notification import MarkReadRequest, Notification
from ..services.notification_service import NotificationService

router = APIRouter(prefix="/v1/notification", tags=["notification"], responses=problem_responses(401, 404, 422))


@router.post("/mark-read", response_model=Notification)
async def mark_read(
    request: MarkReadRequest,
    actor: Actor = CurrentActor,
    db: AsyncSession = DatabaseSession,
) -> Notification:
    """Mark one of the caller's notifications as read."""
    notification = await NotificationService(db).mark_read(request.notification_id, actor)
    return Notification.model_validate(notification)
