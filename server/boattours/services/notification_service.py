"""Notification service: templated messages and best-effort delivery."""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.exceptions import NotFoundError
from ..core.observability import metrics_collector
from ..domain.actor import Actor
from ..models.booking import BookingStatus, PaymentMethod, PaymentStatus
from ..models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationMessage:
    """A message waiting to be stored for one user."""

    user_id: int
    title: str
    message: str
    type: NotificationType = NotificationType.BOOKING


def booking_created(user_id: int, reference: str, payment_method: str) -> NotificationMessage:
    if payment_method == PaymentMethod.CASH:
        follow_up = "Please pay cash on arrival."
    else:
        follow_up = "Please complete payment to confirm your booking."
    return NotificationMessage(
        user_id,
        "Booking Created",
        f"Your booking {reference} has been created successfully. {follow_up}",
    )


def booking_confirmed(user_id: int, reference: str, trip_title: str) -> NotificationMessage:
    return NotificationMessage(
        user_id,
        "Booking Confirmed",
        f'Your booking {reference} for "{trip_title}" has been confirmed!',
    )


def booking_cancelled(user_id: int, reference: str) -> NotificationMessage:
    return NotificationMessage(
        user_id,
        "Booking Cancelled",
        f"Booking {reference} has been cancelled successfully.",
    )


def booking_completed(user_id: int, reference: str, trip_title: str) -> NotificationMessage:
    return NotificationMessage(
        user_id,
        "Trip Completed",
        f'Thank you for sailing with us! Booking {reference} for "{trip_title}" is now completed.',
    )


def payment_succeeded(user_id: int, reference: str, transaction_id: str) -> NotificationMessage:
    return NotificationMessage(
        user_id,
        "Payment Successful",
        f"Payment for booking {reference} has been processed successfully. Transaction ID: {transaction_id}",
        NotificationType.PAYMENT,
    )


def payment_failed(user_id: int, reference: str, reason: str | None = None) -> NotificationMessage:
    text = f"Payment for booking {reference} could not be processed."
    if reason:
        text = f"{text} {reason}"
    return NotificationMessage(user_id, "Payment Failed", text, NotificationType.PAYMENT)


def payment_refunded(user_id: int, reference: str) -> NotificationMessage:
    return NotificationMessage(
        user_id,
        "Payment Refunded",
        f"Payment for booking {reference} has been refunded.",
        NotificationType.PAYMENT,
    )


def guide_assigned(guide_id: int, trip_title: str, scheduled_date, departure_time) -> NotificationMessage:
    return NotificationMessage(
        guide_id,
        "New Assignment",
        f'You have been assigned to guide "{trip_title}" on {scheduled_date} at {departure_time}',
        NotificationType.ASSIGNMENT,
    )


def status_update_message(
    user_id: int,
    reference: str,
    trip_title: str,
    booking_status: str,
    payment_status: str,
    previous_payment_status: str,
) -> NotificationMessage:
    """Pick the message for a staff status update from its target state."""
    if booking_status == BookingStatus.CANCELLED:
        return booking_cancelled(user_id, reference)
    if booking_status == BookingStatus.COMPLETED:
        return booking_completed(user_id, reference, trip_title)
    if payment_status != previous_payment_status:
        if payment_status == PaymentStatus.REFUNDED:
            return payment_refunded(user_id, reference)
        if payment_status == PaymentStatus.FAILED:
            return payment_failed(user_id, reference)
    if booking_status == BookingStatus.CONFIRMED:
        return booking_confirmed(user_id, reference, trip_title)
    return NotificationMessage(
        user_id,
        "Booking Updated",
        f"Booking {reference} is now {BookingStatus(booking_status).value} "
        f"with payment {PaymentStatus(payment_status).value}.",
    )


class NotificationEmitter:
    """
    Stores notifications after the triggering transition has committed.

    Each emission runs in its own session. Failures are logged and counted,
    never raised: the transition that produced the message stands either way.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def emit(self, *messages: NotificationMessage) -> bool:
        if not messages:
            return True

        try:
            async with self.session_factory() as session:
                session.add_all(
                    Notification(
                        user_id=msg.user_id,
                        title=msg.title,
                        message=msg.message,
                        type=msg.type.value,
                    )
                    for msg in messages
                )
                await session.commit()
        except SQLAlchemyError as e:
            for msg in messages:
                metrics_collector.record_notification_failure(msg.title)
            logger.error(
                "Notification emission failed",
                extra={
                    "user_ids": [msg.user_id for msg in messages],
                    "titles": [msg.title for msg in messages],
                    "error": str(e),
                },
                exc_info=True,
            )
            return False

        logger.debug(
            "Notifications emitted",
            extra={"count": len(messages), "titles": [msg.title for msg in messages]}
        )
        return True


class NotificationService:
    """Service for notification operations initiated by their recipient."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def mark_read(self, notification_id: int, actor: Actor) -> Notification:
        """
        Mark one of the caller's notifications as read.

        Raises:
            NotFoundError: If the notification does not exist or belongs to someone else
        """
        stmt = select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == actor.user_id,
        )
        notification = (await self.db.execute(stmt)).scalar_one_or_none()
        if notification is None:
            raise NotFoundError(resource_type="notification", resource_id=notification_id)

        notification.is_read = True
        await self.db.commit()

        logger.info(
            "Notification marked as read",
            extra={"notification_id": notification_id, "user_id": actor.user_id}
        )
        return notification
