"""Background worker that closes out departed schedules."""

import logging

from ..core.config import settings
from ..core.database import async_session_factory
from ..services.booking_service import BookingService
from ..services.notification_service import NotificationEmitter
from .base import BaseWorker

logger = logging.getLogger(__name__)


class ScheduleCompletionWorker(BaseWorker):
    """
    Marks schedules ``completed`` once their sailing has ended.

    Confirmed bookings on those schedules move to ``completed`` and their
    customers are notified.
    """

    def __init__(self, interval_seconds: int | None = None, session_factory=async_session_factory):
        super().__init__(
            name="ScheduleCompletion",
            interval_seconds=interval_seconds or settings.schedule_completion_interval_seconds,
        )
        self.session_factory = session_factory

    async def process(self) -> None:
        async with self.session_factory() as db:
            service = BookingService(db, notifier=NotificationEmitter(self.session_factory))
            completed = await service.complete_departed()

        if completed:
            logger.info(
                "Completed bookings of departed schedules",
                extra={"completed_count": completed, "worker": self.name}
            )
