"""Trips router - status lifecycle endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from nmt_access.core.deps import get_current_session, get_db, require_csrf_header
from nmt_access.core.permissions import PermissionKey
from nmt_access.core.trip_status import get_valid_next_statuses, is_terminal_status
from nmt_access.db.enums import Role
from nmt_access.db.models import Trip, User
from nmt_access.schemas.auth import UserSession
from nmt_access.schemas.trip import TripStatusRead, TripStatusUpdate, TripTransitionsRead
from nmt_access.services import data_scope_service, permission_service, trip_status_service


router = APIRouter(prefix="/trips", tags=["Trips"])


def _get_accessible_trip(
    db: Session,
    session: UserSession,
    trip_id: str,
    permission: PermissionKey,
) -> Trip:
    """
    Load a trip the current user may see and act on.

    Trips outside the user's data scope are reported as 404 so their
    existence is not leaked.
    """
    trip = db.get(Trip, trip_id)
    if not trip:
        raise HTTPException(404, "Trip not found")

    if session.role == Role.DRIVER:
        visible = trip.driver_id == session.user_id
    else:
        user = db.get(User, session.user_id)
        scope = data_scope_service.resolve_user_scope(db, user)
        visible = scope.allows_program(trip.program_id)
    if not visible:
        raise HTTPException(404, "Trip not found")

    if not permission_service.has_permission(
        db, session.user_id, permission.value, program_id=trip.program_id
    ):
        raise HTTPException(403, f"Missing permission: {permission.value}")
    return trip


@router.get("/{trip_id}/transitions", response_model=TripTransitionsRead)
def get_trip_transitions(
    trip_id: str,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """Legal next statuses for a trip."""
    trip = _get_accessible_trip(db, session, trip_id, PermissionKey.VIEW_TRIPS)
    return TripTransitionsRead(
        trip_id=trip.id,
        status=trip.status,
        is_terminal=is_terminal_status(trip.status),
        allowed=list(get_valid_next_statuses(trip.status)),
    )


@router.patch(
    "/{trip_id}/status",
    response_model=TripStatusRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_trip_status(
    trip_id: str,
    data: TripStatusUpdate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """
    Move a trip to a new status.

    Same-status requests succeed with changed=false.
    """
    trip = _get_accessible_trip(db, session, trip_id, PermissionKey.UPDATE_TRIP_STATUS)
    result = trip_status_service.change_trip_status(
        db, trip.id, data.status, session.user_id, reason=data.reason
    )
    db.commit()
    trip = result["trip"]
    return TripStatusRead(
        id=trip.id,
        status=trip.status,
        actual_pickup_time=trip.actual_pickup_time,
        actual_dropoff_time=trip.actual_dropoff_time,
        actual_return_time=trip.actual_return_time,
        changed=result["changed"],
    )
