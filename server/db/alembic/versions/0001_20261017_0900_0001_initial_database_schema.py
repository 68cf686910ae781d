"""Initial database schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create users table
    op.create_table('users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint("role IN ('customer', 'admin', 'operations', 'guide')", name='ck_user_role_valid'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_role'), 'users', ['role'], unique=False)

    # Create boats table
    op.create_table('boats',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.CheckConstraint('capacity > 0', name='ck_boat_capacity_positive'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_boats_name'), 'boats', ['name'], unique=False)

    # Create trips table
    op.create_table('trips',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price_amount', sa.Integer(), nullable=False),
        sa.Column('price_currency', sa.String(length=3), nullable=False),
        sa.Column('duration_hours', sa.Integer(), nullable=False),
        sa.Column('max_capacity', sa.Integer(), nullable=False),
        sa.Column('departure_location', sa.String(length=255), nullable=False),
        sa.Column('return_location', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('price_amount >= 0', name='ck_trip_price_amount_non_negative'),
        sa.CheckConstraint('length(price_currency) = 3', name='ck_trip_price_currency_length'),
        sa.CheckConstraint('duration_hours > 0', name='ck_trip_duration_positive'),
        sa.CheckConstraint('max_capacity > 0', name='ck_trip_max_capacity_positive'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_trips_title'), 'trips', ['title'], unique=False)
    op.create_index(op.f('ix_trips_is_active'), 'trips', ['is_active'], unique=False)

    # Create trip_schedules table
    op.create_table('trip_schedules',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('trip_id', sa.Integer(), nullable=False),
        sa.Column('scheduled_date', sa.Date(), nullable=False),
        sa.Column('departure_time', sa.Time(), nullable=False),
        sa.Column('return_time', sa.Time(), nullable=True),
        sa.Column('boat_id', sa.Integer(), nullable=True),
        sa.Column('guide_id', sa.Integer(), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('available_seats', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('capacity >= 0', name='ck_schedule_capacity_non_negative'),
        sa.CheckConstraint('available_seats >= 0', name='ck_schedule_available_seats_non_negative'),
        sa.CheckConstraint('available_seats <= capacity', name='ck_schedule_available_lte_capacity'),
        sa.CheckConstraint(
            "status IN ('scheduled', 'confirmed', 'cancelled', 'completed')",
            name='ck_schedule_status_valid'
        ),
        sa.ForeignKeyConstraint(['trip_id'], ['trips.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['boat_id'], ['boats.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['guide_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_trip_schedules_trip_id'), 'trip_schedules', ['trip_id'], unique=False)
    op.create_index(op.f('ix_trip_schedules_scheduled_date'), 'trip_schedules', ['scheduled_date'], unique=False)
    op.create_index(op.f('ix_trip_schedules_guide_id'), 'trip_schedules', ['guide_id'], unique=False)
    op.create_index(op.f('ix_trip_schedules_status'), 'trip_schedules', ['status'], unique=False)

    # Create bookings table
    op.create_table('bookings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('trip_schedule_id', sa.Integer(), nullable=False),
        sa.Column('booking_reference', sa.String(length=16), nullable=False),
        sa.Column('number_of_passengers', sa.Integer(), nullable=False),
        sa.Column('total_amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('booking_status', sa.String(length=20), nullable=False),
        sa.Column('payment_status', sa.String(length=20), nullable=False),
        sa.Column('payment_method', sa.String(length=20), nullable=False),
        sa.Column('special_requirements', sa.Text(), nullable=True),
        sa.Column('checked_in', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('number_of_passengers > 0', name='ck_booking_passengers_positive'),
        sa.CheckConstraint('total_amount >= 0', name='ck_booking_total_amount_non_negative'),
        sa.CheckConstraint(
            "booking_status IN ('pending', 'confirmed', 'completed', 'cancelled')",
            name='ck_booking_status_valid'
        ),
        sa.CheckConstraint(
            "payment_status IN ('pending', 'paid', 'refunded', 'failed')",
            name='ck_booking_payment_status_valid'
        ),
        sa.CheckConstraint("payment_method IN ('online', 'cash')", name='ck_booking_payment_method_valid'),
        sa.ForeignKeyConstraint(['customer_id'], ['users.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['trip_schedule_id'], ['trip_schedules.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_bookings_customer_id'), 'bookings', ['customer_id'], unique=False)
    op.create_index(op.f('ix_bookings_trip_schedule_id'), 'bookings', ['trip_schedule_id'], unique=False)
    op.create_index(op.f('ix_bookings_booking_reference'), 'bookings', ['booking_reference'], unique=True)
    op.create_index(op.f('ix_bookings_booking_status'), 'bookings', ['booking_status'], unique=False)
    op.create_index(op.f('ix_bookings_payment_status'), 'bookings', ['payment_status'], unique=False)

    # Create passengers table
    op.create_table('passengers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('booking_id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('emergency_contact', sa.String(length=255), nullable=True),
        sa.CheckConstraint('age IS NULL OR age >= 0', name='ck_passenger_age_non_negative'),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_passengers_booking_id'), 'passengers', ['booking_id'], unique=False)

    # Create payments table
    op.create_table('payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('booking_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('payment_method', sa.String(length=20), nullable=False),
        sa.Column('payment_status', sa.String(length=20), nullable=False),
        sa.Column('transaction_id', sa.String(length=64), nullable=True),
        sa.Column('payment_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('amount >= 0', name='ck_payment_amount_non_negative'),
        sa.CheckConstraint(
            "payment_status IN ('pending', 'completed', 'failed', 'refunded')",
            name='ck_payment_status_valid'
        ),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('transaction_id')
    )
    op.create_index(op.f('ix_payments_booking_id'), 'payments', ['booking_id'], unique=True)

    # Create seat_ledger_entries table
    op.create_table('seat_ledger_entries',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('schedule_id', sa.Integer(), nullable=False),
        sa.Column('booking_id', sa.Integer(), nullable=True),
        sa.Column('reason', sa.String(length=20), nullable=False),
        sa.Column('delta', sa.Integer(), nullable=False),
        sa.Column('available_after', sa.Integer(), nullable=False),
        sa.Column('capacity_after', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('available_after >= 0', name='ck_ledger_available_after_non_negative'),
        sa.CheckConstraint('available_after <= capacity_after', name='ck_ledger_available_lte_capacity'),
        sa.CheckConstraint(
            "reason IN ('reserve', 'release', 'reinstate', 'resize')",
            name='ck_ledger_reason_valid'
        ),
        sa.ForeignKeyConstraint(['schedule_id'], ['trip_schedules.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_seat_ledger_entries_schedule_id'), 'seat_ledger_entries', ['schedule_id'], unique=False)
    op.create_index(op.f('ix_seat_ledger_entries_booking_id'), 'seat_ledger_entries', ['booking_id'], unique=False)
    op.create_index(op.f('ix_seat_ledger_entries_created_at'), 'seat_ledger_entries', ['created_at'], unique=False)

    # Create notifications table
    op.create_table('notifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'], unique=False)
    op.create_index(op.f('ix_notifications_created_at'), 'notifications', ['created_at'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('notifications')
    op.drop_table('seat_ledger_entries')
    op.drop_table('payments')
    op.drop_table('passengers')
    op.drop_table('bookings')
    op.drop_table('trip_schedules')
    op.drop_table('trips')
    op.drop_table('boats')
    op.drop_table('users')
