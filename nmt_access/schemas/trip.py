"""Pydantic schemas for trip status changes."""

from datetime import datetime

from pydantic import BaseModel, Field

from nmt_access.db.enums import TripStatus


class TripStatusUpdate(BaseModel):
    """Request to move a trip to a new status."""
    status: str = Field(..., min_length=1, max_length=20)
    reason: str | None = Field(None, max_length=2000)


class TripTransitionsRead(BaseModel):
    """Legal next statuses for a trip."""
    trip_id: str
    status: TripStatus
    is_terminal: bool
    allowed: list[TripStatus]


class TripStatusRead(BaseModel):
    """Trip status fields after a change."""
    id: str
    status: TripStatus
    actual_pickup_time: datetime | None
    actual_dropoff_time: datetime | None
    actual_return_time: datetime | None
    changed: bool

    model_config = {"from_attributes": True}
