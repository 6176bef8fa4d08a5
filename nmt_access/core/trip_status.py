"""Trip status state machine.

Pure functions only: which transitions are legal and which lifecycle
timestamps a transition stamps. Persistence lives in trip_status_service.

    scheduled   -> confirmed, in_progress, cancelled, no_show
    confirmed   -> in_progress, cancelled, no_show
    in_progress -> completed, cancelled
    completed, cancelled, no_show -> (terminal)
"""

from dataclasses import dataclass

from nmt_access.db.enums import TripStatus

TRIP_STATUS_TRANSITIONS: dict[TripStatus, tuple[TripStatus, ...]] = {
    TripStatus.SCHEDULED: (
        TripStatus.CONFIRMED,
        TripStatus.IN_PROGRESS,
        TripStatus.CANCELLED,
        TripStatus.NO_SHOW,
    ),
    TripStatus.CONFIRMED: (TripStatus.IN_PROGRESS, TripStatus.CANCELLED, TripStatus.NO_SHOW),
    TripStatus.IN_PROGRESS: (TripStatus.COMPLETED, TripStatus.CANCELLED),
    TripStatus.COMPLETED: (),
    TripStatus.CANCELLED: (),
    TripStatus.NO_SHOW: (),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in TRIP_STATUS_TRANSITIONS.items() if not targets
)

UNCHANGED_REASON = "unchanged"


class TripStatusError(Exception):
    """Base exception for trip status errors."""

    pass


class UnknownStatusError(TripStatusError):
    """Status value is not one of the recognized trip statuses."""

    def __init__(self, value: object, *, field: str = "status"):
        self.value = value
        self.field = field
        super().__init__(f"Unknown {field}: {value!r}")


class InvalidTransitionError(TripStatusError):
    """Requested status change is not allowed from the current status."""

    def __init__(
        self,
        current: TripStatus,
        requested: TripStatus,
        allowed: tuple[TripStatus, ...],
        reason: str,
    ):
        self.current = current
        self.requested = requested
        self.allowed = allowed
        self.reason = reason
        super().__init__(reason)


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of validating one status change."""

    from_status: TripStatus
    to_status: TripStatus
    is_valid: bool
    reason: str
    allowed: tuple[TripStatus, ...]

    @property
    def is_noop(self) -> bool:
        return self.from_status == self.to_status


@dataclass(frozen=True)
class TimestampEffects:
    """Lifecycle timestamps a transition should stamp."""

    set_pickup: bool = False
    set_dropoff: bool = False


NO_EFFECTS = TimestampEffects()


def parse_status(value: TripStatus | str, *, field: str = "status") -> TripStatus:
    """Coerce a raw value to TripStatus, never defaulting unknown values."""
    if isinstance(value, TripStatus):
        return value
    if isinstance(value, str) and TripStatus.has_value(value):
        return TripStatus(value)
    raise UnknownStatusError(value, field=field)


def get_valid_next_statuses(current: TripStatus | str) -> tuple[TripStatus, ...]:
    """Statuses reachable in one step from `current`."""
    return TRIP_STATUS_TRANSITIONS[parse_status(current, field="current status")]


def is_terminal_status(status: TripStatus | str) -> bool:
    return parse_status(status) in TERMINAL_STATUSES


def validate_transition(
    current: TripStatus | str,
    requested: TripStatus | str,
) -> TransitionResult:
    """
    Validate a status change.

    Same-status writes are valid no-ops. Illegal edges come back invalid with
    a reason naming the allowed targets.

    Raises:
        UnknownStatusError: current or requested status is not recognized
    """
    from_status = parse_status(current, field="current status")
    to_status = parse_status(requested, field="requested status")
    allowed = TRIP_STATUS_TRANSITIONS[from_status]

    if from_status == to_status:
        return TransitionResult(from_status, to_status, True, UNCHANGED_REASON, allowed)

    if to_status in allowed:
        return TransitionResult(
            from_status,
            to_status,
            True,
            f"Valid transition: {from_status.value} -> {to_status.value}",
            allowed,
        )

    if allowed:
        allowed_text = ", ".join(s.value for s in allowed)
    else:
        allowed_text = f"none ({from_status.value} is terminal)"
    return TransitionResult(
        from_status,
        to_status,
        False,
        f'Cannot transition from "{from_status.value}" to "{to_status.value}". '
        f"Allowed transitions: {allowed_text}",
        allowed,
    )


def ensure_transition(
    current: TripStatus | str,
    requested: TripStatus | str,
) -> TransitionResult:
    """validate_transition, raising InvalidTransitionError when rejected."""
    result = validate_transition(current, requested)
    if not result.is_valid:
        raise InvalidTransitionError(
            result.from_status, result.to_status, result.allowed, result.reason
        )
    return result


def derive_timestamp_effects(
    previous: TripStatus | str,
    next_status: TripStatus | str,
) -> TimestampEffects:
    """
    Which of pickup/dropoff to stamp for a status change.

    Entering in_progress stamps pickup; entering completed stamps dropoff.
    No-op and illegal transitions stamp nothing. Return time for round trips
    is decided by the caller from the trip type.
    """
    result = validate_transition(previous, next_status)
    if not result.is_valid or result.is_noop:
        return NO_EFFECTS

    return TimestampEffects(
        set_pickup=result.to_status == TripStatus.IN_PROGRESS,
        set_dropoff=result.to_status == TripStatus.COMPLETED,
    )
