"""Permission hierarchy enums and role helper sets."""

from enum import Enum

from nmt_access.db.enums.auth import Role


class ScopeLevel(str, Enum):
    """Hierarchy level at which permissions are evaluated."""

    GLOBAL = "global"
    CORPORATE = "corporate"
    PROGRAM = "program"
    LOCATION = "location"


class PermissionSource(str, Enum):
    """Hierarchy level a grant came from."""

    GLOBAL = "global"
    CORPORATE = "corporate"
    PROGRAM = "program"


# Roles that can list, grant and revoke permission rows
ROLES_CAN_MANAGE_PERMISSIONS = {Role.SUPER_ADMIN, Role.CORPORATE_ADMIN}

# Roles whose visible programs come from their own assignment records
ROLES_SCOPED_BY_ASSIGNMENT = {Role.PROGRAM_ADMIN, Role.PROGRAM_USER, Role.DRIVER}
