#!/usr/bin/env python3
"""Setup script for the boat tour booking API."""

import asyncio
import logging
import sys
from datetime import date, time, timedelta
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from boattours.core.database import async_session_factory, close_db
from boattours.core.dependencies import create_access_token
from boattours.models import Boat, Trip, TripSchedule, User, UserRole
from boattours.services.seat_ledger import SeatLedger

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def setup_database():
    """Bring the database schema up to date."""
    logger.info("Running database migrations...")

    # env.py drives its own event loop, so this runs outside asyncio.run
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))
    command.upgrade(alembic_cfg, "head")

    logger.info("Database migrations completed")


SAMPLE_USERS = [
    ("admin", "Ada", "Harbourmaster", UserRole.ADMIN),
    ("ops", "Otto", "Dispatch", UserRole.OPERATIONS),
    ("guide", "Gale", "Skipper", UserRole.GUIDE),
    ("customer", "Cora", "Traveller", UserRole.CUSTOMER),
]


async def create_sample_data():
    """Create users, a boat, a trip and a few weeks of schedules."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        try:
            existing_trips = await db.scalar(select(func.count(Trip.id)))
            if existing_trips:
                logger.info("Sample data already exists, skipping...")
                return

            users = [
                User(
                    username=username,
                    email=f"{username}@boattours.example",
                    first_name=first_name,
                    last_name=last_name,
                    role=role.value,
                )
                for username, first_name, last_name, role in SAMPLE_USERS
            ]
            db.add_all(users)
            db.add(Boat(name="Sea Breeze", capacity=24))
            await db.flush()

            trip = Trip(
                title="Sunset Coastal Cruise",
                description="Three hours along the cliffs with drinks at golden hour",
                price_amount=4500,  # $45.00 per passenger
                price_currency="USD",
                duration_hours=3,
                max_capacity=20,
                departure_location="North Pier",
                return_location="North Pier",
                created_by=users[0].id,
            )
            db.add(trip)
            await db.flush()

            ledger = SeatLedger(db)
            start = date.today() + timedelta(days=7)
            for week in range(4):
                schedule = TripSchedule(
                    trip_id=trip.id,
                    scheduled_date=start + timedelta(weeks=week),
                    departure_time=time(18, 0),
                    return_time=time(21, 0),
                    capacity=trip.max_capacity,
                    available_seats=trip.max_capacity,
                    status="scheduled",
                )
                db.add(schedule)
                await db.flush()
                ledger.record_opening(schedule.id, schedule.capacity, actor_id=users[0].id)

            await db.commit()
            logger.info("Sample data created successfully!")

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Failed to create sample data: {e}")
            raise

        for user in users:
            token = create_access_token(user.id, UserRole(user.role))
            logger.info(f"Bearer token for {user.username} ({user.role}): {token}")


async def seed():
    try:
        await create_sample_data()
    finally:
        await close_db()


def main():
    """Main setup function."""
    logger.info("Starting boat tour booking API setup...")

    setup_database()
    asyncio.run(seed())

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn boattours.main:app --reload")


if __name__ == "__main__":
    main()
