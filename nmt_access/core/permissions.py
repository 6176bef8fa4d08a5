"""Permission registry and the legacy hard-coded role policy.

The registry names every permission key the platform knows about. The
legacy policy is the role -> permission map used before grants moved into
role_permissions; it is only consulted when the permission store is
unavailable (see permission_service.has_permission).
"""

from dataclasses import dataclass
from enum import Enum

from nmt_access.db.enums import Role


class PermissionCategory(str, Enum):
    """Permission categories for UI grouping."""
    ORGANIZATIONS = "Organizations"
    USERS = "Users"
    SERVICE_AREAS = "Service Areas"
    CLIENTS = "Clients"
    DRIVERS = "Drivers"
    VEHICLES = "Vehicles"
    TRIPS = "Trips"
    REPORTS = "Reports"


@dataclass(frozen=True)
class PermissionDef:
    """Permission definition with metadata."""
    key: str
    label: str
    category: PermissionCategory
    cross_org: bool = False  # Reaches outside the caller's own program


class PermissionKey(str, Enum):
    MANAGE_ORGANIZATIONS = "manage_organizations"
    VIEW_ALL_ORGANIZATIONS = "view_all_organizations"
    MANAGE_USERS = "manage_users"
    VIEW_USERS = "view_users"
    MANAGE_SERVICE_AREAS = "manage_service_areas"
    VIEW_SERVICE_AREAS = "view_service_areas"
    MANAGE_CLIENTS = "manage_clients"
    VIEW_CLIENTS = "view_clients"
    MANAGE_DRIVERS = "manage_drivers"
    VIEW_DRIVERS = "view_drivers"
    MANAGE_VEHICLES = "manage_vehicles"
    VIEW_VEHICLES = "view_vehicles"
    MANAGE_TRIPS = "manage_trips"
    VIEW_TRIPS = "view_trips"
    CREATE_TRIPS = "create_trips"
    UPDATE_TRIP_STATUS = "update_trip_status"
    VIEW_CLIENTS_CROSS_ORG = "view_clients_cross_org"
    MANAGE_CLIENTS_CROSS_ORG = "manage_clients_cross_org"
    CREATE_TRIPS_CROSS_ORG = "create_trips_cross_org"
    VIEW_SERVICE_AREAS_CROSS_ORG = "view_service_areas_cross_org"
    VIEW_REPORTS = "view_reports"
    VIEW_ANALYTICS = "view_analytics"


# =============================================================================
# Permission Registry
# =============================================================================

def _registry(*defs: PermissionDef) -> dict[str, PermissionDef]:
    return {d.key: d for d in defs}


PERMISSION_REGISTRY: dict[str, PermissionDef] = _registry(
    # Organizations
    PermissionDef(
        PermissionKey.MANAGE_ORGANIZATIONS.value, "Manage Organizations",
        PermissionCategory.ORGANIZATIONS,
    ),
    PermissionDef(
        PermissionKey.VIEW_ALL_ORGANIZATIONS.value, "View All Organizations",
        PermissionCategory.ORGANIZATIONS,
    ),

    # Users
    PermissionDef(PermissionKey.MANAGE_USERS.value, "Manage Users", PermissionCategory.USERS),
    PermissionDef(PermissionKey.VIEW_USERS.value, "View Users", PermissionCategory.USERS),

    # Service Areas
    PermissionDef(
        PermissionKey.MANAGE_SERVICE_AREAS.value, "Manage Service Areas",
        PermissionCategory.SERVICE_AREAS,
    ),
    PermissionDef(
        PermissionKey.VIEW_SERVICE_AREAS.value, "View Service Areas",
        PermissionCategory.SERVICE_AREAS,
    ),
    PermissionDef(
        PermissionKey.VIEW_SERVICE_AREAS_CROSS_ORG.value, "View Service Areas (Cross-Org)",
        PermissionCategory.SERVICE_AREAS, cross_org=True,
    ),

    # Clients
    PermissionDef(PermissionKey.MANAGE_CLIENTS.value, "Manage Clients", PermissionCategory.CLIENTS),
    PermissionDef(PermissionKey.VIEW_CLIENTS.value, "View Clients", PermissionCategory.CLIENTS),
    PermissionDef(
        PermissionKey.VIEW_CLIENTS_CROSS_ORG.value, "View Clients (Cross-Org)",
        PermissionCategory.CLIENTS, cross_org=True,
    ),
    PermissionDef(
        PermissionKey.MANAGE_CLIENTS_CROSS_ORG.value, "Manage Clients (Cross-Org)",
        PermissionCategory.CLIENTS, cross_org=True,
    ),

    # Drivers and vehicles
    PermissionDef(PermissionKey.MANAGE_DRIVERS.value, "Manage Drivers", PermissionCategory.DRIVERS),
    PermissionDef(PermissionKey.VIEW_DRIVERS.value, "View Drivers", PermissionCategory.DRIVERS),
    PermissionDef(
        PermissionKey.MANAGE_VEHICLES.value, "Manage Vehicles", PermissionCategory.VEHICLES
    ),
    PermissionDef(PermissionKey.VIEW_VEHICLES.value, "View Vehicles", PermissionCategory.VEHICLES),

    # Trips
    PermissionDef(PermissionKey.MANAGE_TRIPS.value, "Manage Trips", PermissionCategory.TRIPS),
    PermissionDef(PermissionKey.VIEW_TRIPS.value, "View Trips", PermissionCategory.TRIPS),
    PermissionDef(PermissionKey.CREATE_TRIPS.value, "Create Trips", PermissionCategory.TRIPS),
    PermissionDef(
        PermissionKey.UPDATE_TRIP_STATUS.value, "Update Trip Status", PermissionCategory.TRIPS
    ),
    PermissionDef(
        PermissionKey.CREATE_TRIPS_CROSS_ORG.value, "Create Trips (Cross-Org)",
        PermissionCategory.TRIPS, cross_org=True,
    ),

    # Reports
    PermissionDef(PermissionKey.VIEW_REPORTS.value, "View Reports", PermissionCategory.REPORTS),
    PermissionDef(
        PermissionKey.VIEW_ANALYTICS.value, "View Analytics", PermissionCategory.REPORTS
    ),
)


# =============================================================================
# Legacy Role Policy
# =============================================================================

_PROGRAM_ADMIN_DEFAULTS = {
    PermissionKey.MANAGE_USERS,
    PermissionKey.VIEW_USERS,
    PermissionKey.MANAGE_SERVICE_AREAS,
    PermissionKey.VIEW_SERVICE_AREAS,
    PermissionKey.MANAGE_CLIENTS,
    PermissionKey.VIEW_CLIENTS,
    PermissionKey.MANAGE_DRIVERS,
    PermissionKey.VIEW_DRIVERS,
    PermissionKey.MANAGE_VEHICLES,
    PermissionKey.VIEW_VEHICLES,
    PermissionKey.MANAGE_TRIPS,
    PermissionKey.VIEW_TRIPS,
    PermissionKey.CREATE_TRIPS,
    PermissionKey.UPDATE_TRIP_STATUS,
    PermissionKey.VIEW_REPORTS,
    PermissionKey.VIEW_ANALYTICS,
}

LEGACY_ROLE_PERMISSIONS: dict[Role, frozenset[str]] = {
    Role.SUPER_ADMIN: frozenset(
        key for key, perm in PERMISSION_REGISTRY.items() if not perm.cross_org
    ),
    Role.CORPORATE_ADMIN: frozenset(
        p.value
        for p in _PROGRAM_ADMIN_DEFAULTS
        | {
            PermissionKey.VIEW_ALL_ORGANIZATIONS,
            PermissionKey.VIEW_CLIENTS_CROSS_ORG,
            PermissionKey.MANAGE_CLIENTS_CROSS_ORG,
            PermissionKey.CREATE_TRIPS_CROSS_ORG,
            PermissionKey.VIEW_SERVICE_AREAS_CROSS_ORG,
        }
    ),
    Role.PROGRAM_ADMIN: frozenset(p.value for p in _PROGRAM_ADMIN_DEFAULTS),
    Role.PROGRAM_USER: frozenset(
        p.value
        for p in (
            PermissionKey.MANAGE_CLIENTS,
            PermissionKey.VIEW_CLIENTS,
            PermissionKey.VIEW_DRIVERS,
            PermissionKey.CREATE_TRIPS,
            PermissionKey.MANAGE_TRIPS,
            PermissionKey.VIEW_TRIPS,
            PermissionKey.VIEW_CLIENTS_CROSS_ORG,
            PermissionKey.MANAGE_CLIENTS_CROSS_ORG,
            PermissionKey.CREATE_TRIPS_CROSS_ORG,
            PermissionKey.VIEW_SERVICE_AREAS_CROSS_ORG,
        )
    ),
    Role.DRIVER: frozenset(
        {PermissionKey.VIEW_TRIPS.value, PermissionKey.UPDATE_TRIP_STATUS.value}
    ),
}


# =============================================================================
# Helper Functions
# =============================================================================

def get_legacy_role_permissions(role: Role | str) -> frozenset[str]:
    """Permissions the legacy policy gives `role`."""
    return LEGACY_ROLE_PERMISSIONS.get(Role(role), frozenset())


def legacy_has_permission(role: Role | str, permission: str) -> bool:
    """Legacy hard-coded check; global, resource-agnostic."""
    return permission in get_legacy_role_permissions(role)
