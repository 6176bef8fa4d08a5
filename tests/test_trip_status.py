"""
Trip status state machine tests.

Tests cover:
- Every (from, to) pair against the transition table
- Same-status writes are valid no-ops with no timestamp effects
- Terminal states have no outgoing transitions
- Unknown statuses are rejected, never defaulted
"""

import itertools

import pytest

from nmt_access.core.trip_status import (
    NO_EFFECTS,
    TERMINAL_STATUSES,
    UNCHANGED_REASON,
    InvalidTransitionError,
    TimestampEffects,
    UnknownStatusError,
    derive_timestamp_effects,
    ensure_transition,
    get_valid_next_statuses,
    is_terminal_status,
    validate_transition,
)
from nmt_access.db.enums import TripStatus


LEGAL_EDGES = {
    (TripStatus.SCHEDULED, TripStatus.CONFIRMED),
    (TripStatus.SCHEDULED, TripStatus.IN_PROGRESS),
    (TripStatus.SCHEDULED, TripStatus.CANCELLED),
    (TripStatus.SCHEDULED, TripStatus.NO_SHOW),
    (TripStatus.CONFIRMED, TripStatus.IN_PROGRESS),
    (TripStatus.CONFIRMED, TripStatus.CANCELLED),
    (TripStatus.CONFIRMED, TripStatus.NO_SHOW),
    (TripStatus.IN_PROGRESS, TripStatus.COMPLETED),
    (TripStatus.IN_PROGRESS, TripStatus.CANCELLED),
}

ALL_PAIRS = list(itertools.product(list(TripStatus), repeat=2))


def test_all_pairs_cover_six_statuses():
    assert len(ALL_PAIRS) == 36


@pytest.mark.parametrize(("current", "requested"), ALL_PAIRS)
def test_validate_transition_matches_table(current, requested):
    result = validate_transition(current, requested)

    expected = current == requested or (current, requested) in LEGAL_EDGES
    assert result.is_valid is expected
    assert result.allowed == get_valid_next_statuses(current)


@pytest.mark.parametrize(("current", "requested"), ALL_PAIRS)
def test_timestamp_effects_only_on_legal_entries(current, requested):
    effects = derive_timestamp_effects(current, requested)

    legal = (current, requested) in LEGAL_EDGES
    assert effects.set_pickup is (legal and requested == TripStatus.IN_PROGRESS)
    assert effects.set_dropoff is (legal and requested == TripStatus.COMPLETED)


@pytest.mark.parametrize("status", list(TripStatus))
def test_same_status_is_noop(status):
    result = validate_transition(status, status)

    assert result.is_valid
    assert result.is_noop
    assert result.reason == UNCHANGED_REASON
    assert derive_timestamp_effects(status, status) == NO_EFFECTS


def test_string_values_accepted():
    result = validate_transition("scheduled", "confirmed")

    assert result.is_valid
    assert result.from_status == TripStatus.SCHEDULED
    assert result.to_status == TripStatus.CONFIRMED


def test_in_progress_sets_pickup_and_completed_sets_dropoff():
    pickup = derive_timestamp_effects(TripStatus.CONFIRMED, TripStatus.IN_PROGRESS)
    dropoff = derive_timestamp_effects(TripStatus.IN_PROGRESS, TripStatus.COMPLETED)

    assert pickup == TimestampEffects(set_pickup=True)
    assert dropoff == TimestampEffects(set_dropoff=True)


def test_scheduled_to_completed_is_rejected_with_allowed_list():
    result = validate_transition(TripStatus.SCHEDULED, TripStatus.COMPLETED)

    assert not result.is_valid
    assert "confirmed, in_progress, cancelled, no_show" in result.reason


# =============================================================================
# Terminal States
# =============================================================================

def test_terminal_statuses():
    assert TERMINAL_STATUSES == {TripStatus.COMPLETED, TripStatus.CANCELLED, TripStatus.NO_SHOW}


@pytest.mark.parametrize("status", [TripStatus.COMPLETED, TripStatus.CANCELLED, TripStatus.NO_SHOW])
def test_terminal_status_has_no_outgoing_transitions(status):
    assert is_terminal_status(status)
    assert get_valid_next_statuses(status) == ()

    for other in TripStatus:
        if other == status:
            continue
        result = validate_transition(status, other)
        assert not result.is_valid
        assert "terminal" in result.reason


@pytest.mark.parametrize(
    "status", [TripStatus.SCHEDULED, TripStatus.CONFIRMED, TripStatus.IN_PROGRESS]
)
def test_non_terminal_statuses(status):
    assert not is_terminal_status(status)
    assert get_valid_next_statuses(status)


# =============================================================================
# Errors
# =============================================================================

def test_ensure_transition_raises_with_allowed_states():
    with pytest.raises(InvalidTransitionError) as exc_info:
        ensure_transition(TripStatus.CONFIRMED, TripStatus.SCHEDULED)

    assert exc_info.value.current == TripStatus.CONFIRMED
    assert exc_info.value.requested == TripStatus.SCHEDULED
    assert exc_info.value.allowed == (
        TripStatus.IN_PROGRESS,
        TripStatus.CANCELLED,
        TripStatus.NO_SHOW,
    )


def test_ensure_transition_returns_result_for_legal_edge():
    result = ensure_transition(TripStatus.IN_PROGRESS, TripStatus.COMPLETED)

    assert result.is_valid
    assert not result.is_noop


@pytest.mark.parametrize(
    ("current", "requested"),
    [("bogus", "confirmed"), ("scheduled", "bogus"), ("", "scheduled"), (None, "scheduled")],
)
def test_unknown_status_raises(current, requested):
    with pytest.raises(UnknownStatusError):
        validate_transition(current, requested)


def test_unknown_status_never_yields_effects():
    with pytest.raises(UnknownStatusError):
        derive_timestamp_effects("pending", "completed")
