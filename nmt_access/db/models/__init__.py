"""SQLAlchemy ORM models."""

from nmt_access.db.models.auth import User
from nmt_access.db.models.organizations import CorporateClient, Location, Program
from nmt_access.db.models.permissions import RolePermission
from nmt_access.db.models.trips import Trip, TripStatusLog

__all__ = [
    "CorporateClient",
    "Location",
    "Program",
    "RolePermission",
    "Trip",
    "TripStatusLog",
    "User",
]
