"""FastAPI routers package."""

from .booking import router as booking_router
from .health import router as health_router
from .metrics import router as metrics_router
from .notification import router as notification_router
from .schedule import router as schedule_router
from .trip import router as trip_router

__all__ = [
    "booking_router",
    "health_router",
    "metrics_router",
    "notification_router",
    "schedule_router",
    "trip_router",
]
