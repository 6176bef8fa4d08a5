"""Auth-related enums."""

from enum import Enum


class Role(str, Enum):
    """
    System roles.

    Privilege is scope-dependent, not linear:
    - SUPER_ADMIN: platform operator, scope-transcendent
    - CORPORATE_ADMIN: administers one corporate client and all of its programs
    - PROGRAM_ADMIN: administers the programs they are assigned to
    - PROGRAM_USER: day-to-day staff within assigned programs (booking, clients)
    - DRIVER: sees and updates the trips assigned to them
    """

    SUPER_ADMIN = "super_admin"
    CORPORATE_ADMIN = "corporate_admin"
    PROGRAM_ADMIN = "program_admin"
    PROGRAM_USER = "program_user"
    DRIVER = "driver"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_
