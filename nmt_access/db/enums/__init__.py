"""Enum definitions for application constants."""

from nmt_access.db.enums.auth import Role
from nmt_access.db.enums.permissions import (
    ROLES_CAN_MANAGE_PERMISSIONS,
    ROLES_SCOPED_BY_ASSIGNMENT,
    PermissionSource,
    ScopeLevel,
)
from nmt_access.db.enums.trips import TripStatus, TripType

DEFAULT_TRIP_STATUS = TripStatus.SCHEDULED

__all__ = [
    "DEFAULT_TRIP_STATUS",
    "PermissionSource",
    "ROLES_CAN_MANAGE_PERMISSIONS",
    "ROLES_SCOPED_BY_ASSIGNMENT",
    "Role",
    "ScopeLevel",
    "TripStatus",
    "TripType",
]
