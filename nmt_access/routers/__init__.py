"""API routers."""

from nmt_access.routers.permissions import router as permissions_router
from nmt_access.routers.trips import router as trips_router

__all__ = ["permissions_router", "trips_router"]
