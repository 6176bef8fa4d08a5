"""Trip status change path tests (persistence + timestamps + history)."""

from datetime import datetime, timezone

import pytest

from nmt_access.core.trip_status import InvalidTransitionError, UnknownStatusError
from nmt_access.db.enums import Role, TripStatus, TripType
from nmt_access.db.models import TripStatusLog
from nmt_access.services import trip_status_service
from nmt_access.services.trip_status_service import TripNotFoundError

NOW = datetime(2026, 3, 2, 9, 15, tzinfo=timezone.utc)
LATER = datetime(2026, 3, 2, 10, 5, tzinfo=timezone.utc)


@pytest.fixture
def dispatcher(make_user):
    return make_user(Role.PROGRAM_USER, corporate_client_id="acme", primary_program_id="acme_p1")


def test_confirm_writes_history(db, make_trip, dispatcher):
    trip = make_trip()

    result = trip_status_service.change_trip_status(
        db, trip.id, "confirmed", dispatcher.user_id, reason="Called rider", now=NOW
    )

    assert result["changed"]
    assert result["previous_status"] == TripStatus.SCHEDULED
    assert trip.status == "confirmed"
    assert trip.updated_by == dispatcher.user_id
    assert trip.actual_pickup_time is None

    log = db.query(TripStatusLog).filter_by(trip_id=trip.id).one()
    assert (log.old_status, log.new_status) == ("scheduled", "confirmed")
    assert log.reason == "Called rider"
    assert log.changed_by == dispatcher.user_id


def test_in_progress_then_completed_stamps_times(db, make_trip, dispatcher):
    trip = make_trip(status=TripStatus.CONFIRMED)

    trip_status_service.change_trip_status(db, trip.id, "in_progress", dispatcher.user_id, now=NOW)
    assert trip.actual_pickup_time == NOW
    assert trip.actual_dropoff_time is None

    trip_status_service.change_trip_status(db, trip.id, "completed", dispatcher.user_id, now=LATER)
    assert trip.actual_pickup_time == NOW
    assert trip.actual_dropoff_time == LATER
    assert trip.actual_return_time is None


def test_round_trip_completion_stamps_return_time(db, make_trip, dispatcher):
    trip = make_trip(status=TripStatus.IN_PROGRESS, trip_type=TripType.ROUND_TRIP)

    trip_status_service.change_trip_status(db, trip.id, "completed", dispatcher.user_id, now=LATER)

    assert trip.actual_dropoff_time == LATER
    assert trip.actual_return_time == LATER


def test_cancel_from_in_progress_stamps_nothing(db, make_trip, dispatcher):
    trip = make_trip(status=TripStatus.IN_PROGRESS)

    trip_status_service.change_trip_status(db, trip.id, "cancelled", dispatcher.user_id, now=LATER)

    assert trip.status == "cancelled"
    assert trip.actual_dropoff_time is None


def test_same_status_is_noop(db, make_trip, dispatcher):
    trip = make_trip(status=TripStatus.IN_PROGRESS)

    result = trip_status_service.change_trip_status(
        db, trip.id, "in_progress", dispatcher.user_id, now=NOW
    )

    assert not result["changed"]
    assert trip.actual_pickup_time is None
    assert db.query(TripStatusLog).count() == 0


def test_invalid_transition_leaves_trip_untouched(db, make_trip, dispatcher):
    trip = make_trip()

    with pytest.raises(InvalidTransitionError) as exc_info:
        trip_status_service.change_trip_status(db, trip.id, "completed", dispatcher.user_id)

    assert TripStatus.IN_PROGRESS in exc_info.value.allowed
    assert trip.status == "scheduled"
    assert db.query(TripStatusLog).count() == 0


def test_terminal_trip_cannot_move(db, make_trip, dispatcher):
    trip = make_trip(status=TripStatus.NO_SHOW)

    with pytest.raises(InvalidTransitionError) as exc_info:
        trip_status_service.change_trip_status(db, trip.id, "scheduled", dispatcher.user_id)

    assert exc_info.value.allowed == ()


def test_unknown_requested_status(db, make_trip, dispatcher):
    trip = make_trip()

    with pytest.raises(UnknownStatusError):
        trip_status_service.change_trip_status(db, trip.id, "en_route", dispatcher.user_id)


def test_unknown_stored_status(db, make_trip, dispatcher):
    trip = make_trip()
    trip.status = "legacy_pending"
    db.commit()

    with pytest.raises(UnknownStatusError):
        trip_status_service.change_trip_status(db, trip.id, "confirmed", dispatcher.user_id)


def test_unknown_trip(db, hierarchy):
    with pytest.raises(TripNotFoundError):
        trip_status_service.change_trip_status(db, "missing", "confirmed", None)
