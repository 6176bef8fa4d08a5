"""Trips and their status history."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nmt_access.db.base import Base
from nmt_access.db.enums import DEFAULT_TRIP_STATUS, TripType


class Trip(Base):
    """
    A booked transport.

    Status follows the lifecycle in core.trip_status. Trips are never
    hard-deleted; cancellation is a status.
    """

    __tablename__ = "trips"
    __table_args__ = (
        Index("idx_trips_program_status", "program_id", "status"),
        Index("idx_trips_driver", "driver_id"),
    )

    id: Mapped[str] = mapped_column(
        String(50), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    program_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("programs.id", ondelete="CASCADE"),
        nullable=False,
    )
    location_id: Mapped[str | None] = mapped_column(
        String(50),
        ForeignKey("locations.id", ondelete="SET NULL"),
        nullable=True,
    )
    driver_id: Mapped[str | None] = mapped_column(
        String(50),
        ForeignKey("users.user_id", ondelete="SET NULL"),
        nullable=True,
    )
    trip_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TripType.ONE_WAY.value
    )
    pickup_address: Mapped[str] = mapped_column(Text, nullable=False)
    dropoff_address: Mapped[str] = mapped_column(Text, nullable=False)
    scheduled_pickup_time: Mapped[datetime] = mapped_column(nullable=False)
    scheduled_return_time: Mapped[datetime | None] = mapped_column(nullable=True)
    actual_pickup_time: Mapped[datetime | None] = mapped_column(nullable=True)
    actual_dropoff_time: Mapped[datetime | None] = mapped_column(nullable=True)
    actual_return_time: Mapped[datetime | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DEFAULT_TRIP_STATUS.value
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(
        String(50),
        ForeignKey("users.user_id", ondelete="SET NULL"),
        nullable=True,
    )
    updated_by: Mapped[str | None] = mapped_column(
        String(50),
        ForeignKey("users.user_id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    status_logs: Mapped[list["TripStatusLog"]] = relationship(
        back_populates="trip",
        cascade="all, delete-orphan",
        order_by="TripStatusLog.created_at",
    )


class TripStatusLog(Base):
    """Append-only record of applied trip status changes."""

    __tablename__ = "trip_status_logs"
    __table_args__ = (
        Index("idx_trip_status_logs_trip", "trip_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        String(50), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    trip_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("trips.id", ondelete="CASCADE"),
        nullable=False,
    )
    old_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    new_status: Mapped[str] = mapped_column(String(20), nullable=False)
    changed_by: Mapped[str | None] = mapped_column(
        String(50),
        ForeignKey("users.user_id", ondelete="SET NULL"),
        nullable=True,
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    trip: Mapped[Trip] = relationship(back_populates="status_logs")
