"""Worker manager for coordinating background tasks."""

import asyncio
import logging
from typing import Dict

from .base import BaseWorker
from .schedule_completion_worker import ScheduleCompletionWorker

logger = logging.getLogger(__name__)


class WorkerManager:
    """
    Manages background workers for the application.

    Coordinates starting and stopping of all background workers.
    """

    def __init__(self):
        self.workers: Dict[str, BaseWorker] = {
            "schedule_completion": ScheduleCompletionWorker(),
        }

    async def start_all(self) -> None:
        """Start all workers."""
        for worker in self.workers.values():
            await worker.start()

        logger.info("Background workers started", extra={"worker_count": len(self.workers)})

    async def stop_all(self) -> None:
        """Stop all running workers."""
        results = await asyncio.gather(
            *(worker.stop() for worker in self.workers.values() if worker.running),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, Exception):
                logger.error("Error stopping worker", exc_info=result)

        logger.info("Background workers stopped")

    def get_worker_status(self) -> Dict[str, bool]:
        """Map worker names to their running status."""
        return {name: worker.running for name, worker in self.workers.items()}


# Global worker manager instance
worker_manager = WorkerManager()
