"""Trip status change path (validate + stamp timestamps + history)."""

import logging
from datetime import datetime, timezone
from typing import TypedDict

from sqlalchemy.orm import Session

from nmt_access.core.structured_logging import build_log_context
from nmt_access.core.trip_status import (
    derive_timestamp_effects,
    ensure_transition,
    parse_status,
)
from nmt_access.db.enums import TripStatus, TripType
from nmt_access.db.models import Trip, TripStatusLog

logger = logging.getLogger(__name__)


class TripNotFoundError(Exception):
    """No trip with the given id."""

    pass


class TripStatusChangeResult(TypedDict):
    """Result of a status change operation."""

    trip: Trip
    changed: bool  # False for same-status writes
    previous_status: TripStatus


def get_trip(db: Session, trip_id: str) -> Trip:
    trip = db.get(Trip, trip_id)
    if trip is None:
        raise TripNotFoundError(f"Trip {trip_id} not found")
    return trip


def change_trip_status(
    db: Session,
    trip_id: str,
    new_status: TripStatus | str,
    user_id: str | None,
    reason: str | None = None,
    now: datetime | None = None,
) -> TripStatusChangeResult:
    """
    Move a trip to `new_status`.

    Same-status writes succeed without touching the row. Entering in_progress
    stamps actual_pickup_time; entering completed stamps actual_dropoff_time
    and, for round trips, actual_return_time. Existing stamps are kept.

    Raises:
        TripNotFoundError: unknown trip id
        UnknownStatusError: stored or requested status is not recognized
        InvalidTransitionError: transition not allowed from the current status
    """
    trip = get_trip(db, trip_id)
    previous = parse_status(trip.status, field="current status")
    result = ensure_transition(previous, new_status)

    if result.is_noop:
        return TripStatusChangeResult(trip=trip, changed=False, previous_status=previous)

    now = now or datetime.now(timezone.utc)
    effects = derive_timestamp_effects(previous, result.to_status)
    if effects.set_pickup and trip.actual_pickup_time is None:
        trip.actual_pickup_time = now
    if effects.set_dropoff:
        if trip.actual_dropoff_time is None:
            trip.actual_dropoff_time = now
        if trip.trip_type == TripType.ROUND_TRIP.value and trip.actual_return_time is None:
            trip.actual_return_time = now

    trip.status = result.to_status.value
    trip.updated_by = user_id
    trip.updated_at = now
    db.add(
        TripStatusLog(
            trip_id=trip.id,
            old_status=previous.value,
            new_status=result.to_status.value,
            changed_by=user_id,
            reason=reason,
        )
    )
    db.flush()

    logger.info(
        "Trip %s status %s -> %s",
        trip.id,
        previous.value,
        result.to_status.value,
        extra=build_log_context(user_id=user_id, program_id=trip.program_id),
    )
    return TripStatusChangeResult(trip=trip, changed=True, previous_status=previous)
