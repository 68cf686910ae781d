"""Background workers for the boat tour booking system."""

from .schedule_completion_worker import ScheduleCompletionWorker

__all__ = ["ScheduleCompletionWorker"]
