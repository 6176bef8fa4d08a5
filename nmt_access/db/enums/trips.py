"""Trip-related enums."""

from enum import Enum


class TripStatus(str, Enum):
    """
    Trip lifecycle status.

    COMPLETED, CANCELLED and NO_SHOW are terminal.
    Cancellation is a status, trips are never hard-deleted.
    """

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid trip status."""
        return value in cls._value2member_map_


class TripType(str, Enum):
    """Trip leg structure."""

    ONE_WAY = "one_way"
    ROUND_TRIP = "round_trip"
