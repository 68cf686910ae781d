"""Seat ledger: the only writer of a schedule's seat counter."""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import CapacityError, ConflictError, NotFoundError, ValidationError
from ..core.observability import metrics_collector
from ..models.ledger import LedgerReason, SeatLedgerEntry
from ..models.trip import ScheduleStatus, TripSchedule

logger = logging.getLogger(__name__)

# Only schedules still open for sale accept new bookings
BOOKABLE_STATUSES = (ScheduleStatus.SCHEDULED,)

# Reinstating a cancelled booking is allowed until the sailing is closed
ACTIVE_STATUSES = (ScheduleStatus.SCHEDULED, ScheduleStatus.CONFIRMED)


@dataclass(frozen=True)
class SeatCounter:
    """Seat counter of a schedule after a ledger operation."""

    schedule_id: int
    available_seats: int
    capacity: int

    @property
    def booked_seats(self) -> int:
        return self.capacity - self.available_seats


class SeatLedger:
    """
    Maintains ``TripSchedule.available_seats``.

    Every mutation is a single guarded UPDATE so concurrent requests cannot
    push the counter outside ``[0, capacity]``, and every mutation appends a
    ``SeatLedgerEntry`` to the caller's transaction. Nothing here commits.
    """

    MAX_CAS_ATTEMPTS = 5

    def __init__(self, db: AsyncSession):
        self.db = db

    async def reserve(
        self,
        schedule_id: int,
        count: int,
        booking_id: Optional[int] = None,
        actor_id: Optional[int] = None,
        reason: LedgerReason = LedgerReason.RESERVE,
        statuses: Iterable[ScheduleStatus] = BOOKABLE_STATUSES,
    ) -> SeatCounter:
        """
        Take ``count`` seats from a schedule.

        Args:
            schedule_id: Schedule to reserve on
            count: Number of seats, at least one
            booking_id: Booking the seats are taken for
            actor_id: User performing the operation
            reason: Ledger reason recorded for the entry
            statuses: Schedule statuses that accept the reservation

        Returns:
            Seat counter after the decrement

        Raises:
            ValidationError: If count is not positive
            NotFoundError: If the schedule does not exist or is not open
            CapacityError: If fewer than ``count`` seats remain
        """
        if count <= 0:
            raise ValidationError(detail="Seat count must be positive", errors={"count": count})

        allowed = [status.value for status in statuses]

        stmt = (
            update(TripSchedule)
            .where(
                TripSchedule.id == schedule_id,
                TripSchedule.status.in_(allowed),
                TripSchedule.available_seats >= count,
            )
            .values(available_seats=TripSchedule.available_seats - count)
            .returning(TripSchedule.available_seats, TripSchedule.capacity)
            .execution_options(synchronize_session=False)
        )
        row = (await self.db.execute(stmt)).one_or_none()

        if row is None:
            current = await self._read_counter(schedule_id)
            if current is None or current.status not in allowed:
                raise NotFoundError(
                    resource_type="trip schedule",
                    resource_id=schedule_id,
                    detail=f"Trip schedule {schedule_id} not found or not available for booking",
                )

            metrics_collector.record_seat_rejection()
            logger.warning(
                "Seat reservation rejected - insufficient capacity",
                extra={
                    "schedule_id": schedule_id,
                    "requested_seats": count,
                    "available_seats": current.available_seats,
                    "booking_id": booking_id,
                }
            )
            raise CapacityError(
                schedule_id=schedule_id,
                requested_seats=count,
                available_seats=current.available_seats,
            )

        counter = SeatCounter(schedule_id, row.available_seats, row.capacity)
        self._record(counter, reason, -count, booking_id, actor_id)

        logger.info(
            "Seats reserved",
            extra={
                "schedule_id": schedule_id,
                "booking_id": booking_id,
                "seats": count,
                "reason": reason.value,
                "available_after": counter.available_seats,
            }
        )
        return counter

    async def release(
        self,
        schedule_id: int,
        count: int,
        booking_id: Optional[int] = None,
        actor_id: Optional[int] = None,
    ) -> SeatCounter:
        """
        Give ``count`` seats back to a schedule, never exceeding its capacity.

        The credit is ``min(count, capacity - available_seats)``; a clamped
        release is logged as a warning.

        Raises:
            ValidationError: If count is not positive
            NotFoundError: If the schedule does not exist
            ConflictError: If the counter kept changing underneath us
        """
        if count <= 0:
            raise ValidationError(detail="Seat count must be positive", errors={"count": count})

        for _ in range(self.MAX_CAS_ATTEMPTS):
            current = await self._read_counter(schedule_id)
            if current is None:
                raise NotFoundError(resource_type="trip schedule", resource_id=schedule_id)

            credit = min(count, current.capacity - current.available_seats)
            if credit < count:
                metrics_collector.record_release_clamped()
                logger.warning(
                    "Seat release clamped at schedule capacity",
                    extra={
                        "schedule_id": schedule_id,
                        "booking_id": booking_id,
                        "requested_seats": count,
                        "credited_seats": credit,
                        "capacity": current.capacity,
                    }
                )

            stmt = (
                update(TripSchedule)
                .where(
                    TripSchedule.id == schedule_id,
                    TripSchedule.available_seats == current.available_seats,
                    TripSchedule.capacity == current.capacity,
                )
                .values(available_seats=current.available_seats + credit)
                .returning(TripSchedule.available_seats, TripSchedule.capacity)
                .execution_options(synchronize_session=False)
            )
            row = (await self.db.execute(stmt)).one_or_none()
            if row is None:
                continue

            counter = SeatCounter(schedule_id, row.available_seats, row.capacity)
            self._record(counter, LedgerReason.RELEASE, credit, booking_id, actor_id)

            logger.info(
                "Seats released",
                extra={
                    "schedule_id": schedule_id,
                    "booking_id": booking_id,
                    "seats": credit,
                    "available_after": counter.available_seats,
                }
            )
            return counter

        raise ConflictError(
            detail=f"Seat counter of schedule {schedule_id} changed concurrently, please retry",
            conflicting_resource={"schedule_id": schedule_id},
        )

    async def resize(
        self,
        schedule_id: int,
        new_capacity: int,
        actor_id: Optional[int] = None,
    ) -> SeatCounter:
        """
        Change a schedule's capacity while keeping its booked seats.

        Raises:
            ValidationError: If new_capacity is negative
            NotFoundError: If the schedule does not exist
            ConflictError: If new_capacity is below the seats already booked
        """
        if new_capacity < 0:
            raise ValidationError(
                detail="Capacity cannot be negative",
                errors={"capacity": new_capacity},
            )

        for _ in range(self.MAX_CAS_ATTEMPTS):
            current = await self._read_counter(schedule_id)
            if current is None:
                raise NotFoundError(resource_type="trip schedule", resource_id=schedule_id)

            booked = current.capacity - current.available_seats
            if new_capacity < booked:
                raise ConflictError(
                    detail=(
                        f"Cannot resize schedule {schedule_id} to {new_capacity} seats, "
                        f"{booked} seats are already booked"
                    ),
                    conflicting_resource={
                        "schedule_id": schedule_id,
                        "booked_seats": booked,
                        "requested_capacity": new_capacity,
                    },
                )

            stmt = (
                update(TripSchedule)
                .where(
                    TripSchedule.id == schedule_id,
                    TripSchedule.available_seats == current.available_seats,
                    TripSchedule.capacity == current.capacity,
                )
                .values(capacity=new_capacity, available_seats=new_capacity - booked)
                .returning(TripSchedule.available_seats, TripSchedule.capacity)
                .execution_options(synchronize_session=False)
            )
            row = (await self.db.execute(stmt)).one_or_none()
            if row is None:
                continue

            counter = SeatCounter(schedule_id, row.available_seats, row.capacity)
            self._record(counter, LedgerReason.RESIZE, new_capacity - current.capacity, None, actor_id)

            logger.info(
                "Schedule capacity resized",
                extra={
                    "schedule_id": schedule_id,
                    "capacity_before": current.capacity,
                    "capacity_after": counter.capacity,
                    "available_after": counter.available_seats,
                }
            )
            return counter

        raise ConflictError(
            detail=f"Seat counter of schedule {schedule_id} changed concurrently, please retry",
            conflicting_resource={"schedule_id": schedule_id},
        )

    def record_opening(self, schedule_id: int, capacity: int, actor_id: Optional[int] = None) -> None:
        """Audit entry for the counter of a newly created schedule."""
        counter = SeatCounter(schedule_id, capacity, capacity)
        self._record(counter, LedgerReason.RESIZE, capacity, None, actor_id)

    async def get_counter(self, schedule_id: int) -> SeatCounter:
        """Read the current counter straight from the database."""
        current = await self._read_counter(schedule_id)
        if current is None:
            raise NotFoundError(resource_type="trip schedule", resource_id=schedule_id)
        return SeatCounter(schedule_id, current.available_seats, current.capacity)

    async def get_entries(self, schedule_id: int) -> list[SeatLedgerEntry]:
        """Ledger entries of a schedule, oldest first."""
        stmt = (
            select(SeatLedgerEntry)
            .where(SeatLedgerEntry.schedule_id == schedule_id)
            .order_by(SeatLedgerEntry.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def _read_counter(self, schedule_id: int):
        stmt = select(
            TripSchedule.available_seats,
            TripSchedule.capacity,
            TripSchedule.status,
        ).where(TripSchedule.id == schedule_id)
        return (await self.db.execute(stmt)).one_or_none()

    def _record(
        self,
        counter: SeatCounter,
        reason: LedgerReason,
        delta: int,
        booking_id: Optional[int],
        actor_id: Optional[int],
    ) -> None:
        self.db.add(
            SeatLedgerEntry(
                schedule_id=counter.schedule_id,
                booking_id=booking_id,
                reason=reason.value,
                delta=delta,
                available_after=counter.available_seats,
                capacity_after=counter.capacity,
                actor_id=actor_id,
            )
        )
