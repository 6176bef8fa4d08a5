"""Permission store adapter over the role_permissions table.

Narrow read/write surface used by permission_service. Translates database
failures into three distinguishable conditions:

- DuplicateGrantError: the unique index rejected an insert
- GrantNotFoundError: delete of an unknown id
- PermissionStoreUnavailableError: the table itself is missing (migration gap)

"No rows" is never an error: find_grants returns an empty list.
"""

import logging

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from nmt_access.db.enums import Role
from nmt_access.db.models import RolePermission

logger = logging.getLogger(__name__)

ROLE_PERMISSIONS_TABLE = RolePermission.__tablename__

# PostgreSQL SQLSTATE for undefined_table
UNDEFINED_TABLE_SQLSTATE = "42P01"

_MISSING_RELATION_MARKERS = ("no such table", "does not exist", "undefinedtable")


class PermissionStoreError(Exception):
    """Base exception for permission store errors."""

    pass


class DuplicateGrantError(PermissionStoreError):
    """A grant with the same (role, permission, resource, scope) already exists."""

    pass


class GrantNotFoundError(PermissionStoreError):
    """No grant with the given id."""

    pass


class PermissionStoreUnavailableError(PermissionStoreError):
    """The role_permissions relation is missing; permissions cannot be evaluated."""

    migration_required = True

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or f"{ROLE_PERMISSIONS_TABLE} table does not exist. Run database migrations."
        )


def is_missing_relation_error(exc: BaseException) -> bool:
    """True if a database error means the queried table does not exist."""
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate == UNDEFINED_TABLE_SQLSTATE:
        return True
    message = str(orig if orig is not None else exc).lower()
    return any(marker in message for marker in _MISSING_RELATION_MARKERS)


# =============================================================================
# Scope Filters
# =============================================================================

def program_scope_filter(program_id: str) -> ColumnElement[bool]:
    """Program-specific grants for `program_id` plus every program-less grant."""
    return or_(
        RolePermission.program_id == program_id,
        RolePermission.program_id.is_(None),
    )


def corporate_scope_filter(corporate_client_id: str) -> ColumnElement[bool]:
    """
    Corporate grants for `corporate_client_id` plus global grants.

    Program-scoped rows are excluded even when their corporate_client_id is
    NULL, so a program grant can never satisfy a corporate-level check.
    """
    return and_(
        RolePermission.program_id.is_(None),
        or_(
            RolePermission.corporate_client_id == corporate_client_id,
            RolePermission.corporate_client_id.is_(None),
        ),
    )


def global_scope_filter() -> ColumnElement[bool]:
    """Grants with no program and no corporate client."""
    return and_(
        RolePermission.program_id.is_(None),
        RolePermission.corporate_client_id.is_(None),
    )


def corporate_client_visibility_filter(corporate_client_id: str) -> ColumnElement[bool]:
    """Rows that carry no corporate client or carry `corporate_client_id`."""
    return or_(
        RolePermission.corporate_client_id.is_(None),
        RolePermission.corporate_client_id == corporate_client_id,
    )


# =============================================================================
# Reads
# =============================================================================

def find_grants(
    db: Session,
    role: Role | str | None,
    scope_filter: ColumnElement[bool] | None = None,
    *,
    permission: str | None = None,
    resource: str | None = None,
    limit: int | None = None,
) -> list[RolePermission]:
    """
    Fetch grants matching role and scope.

    `role=None` lists grants for every role (admin listing).

    Raises:
        PermissionStoreUnavailableError: role_permissions does not exist
    """
    query = select(RolePermission)
    if role is not None:
        query = query.where(RolePermission.role == Role(role).value)
    if scope_filter is not None:
        query = query.where(scope_filter)
    if permission is not None:
        query = query.where(RolePermission.permission == permission)
    if resource is not None:
        query = query.where(RolePermission.resource == resource)
    query = query.order_by(RolePermission.role, RolePermission.permission, RolePermission.id)
    if limit is not None:
        query = query.limit(limit)

    try:
        return list(db.execute(query).scalars().all())
    except DBAPIError as exc:
        if is_missing_relation_error(exc):
            raise PermissionStoreUnavailableError() from exc
        raise


def get_grant(db: Session, grant_id: str) -> RolePermission | None:
    """Get a single grant by id."""
    try:
        return db.get(RolePermission, grant_id)
    except DBAPIError as exc:
        if is_missing_relation_error(exc):
            raise PermissionStoreUnavailableError() from exc
        raise


# =============================================================================
# Writes
# =============================================================================

def insert_grant(
    db: Session,
    role: Role | str,
    permission: str,
    resource: str = "*",
    program_id: str | None = None,
    corporate_client_id: str | None = None,
) -> RolePermission:
    """
    Insert a grant, relying on the unique index for conflict detection.

    Raises:
        DuplicateGrantError: identical tuple already stored
        PermissionStoreUnavailableError: role_permissions does not exist
    """
    grant = RolePermission(
        role=Role(role).value,
        permission=permission,
        resource=resource or "*",
        program_id=program_id or None,
        corporate_client_id=corporate_client_id or None,
    )
    try:
        db.add(grant)
        db.flush()
    except IntegrityError:
        db.rollback()
        raise DuplicateGrantError(
            f"Permission '{permission}' on '{grant.resource}' already exists for role "
            f"'{grant.role}' at this scope"
        )
    except DBAPIError as exc:
        db.rollback()
        if is_missing_relation_error(exc):
            raise PermissionStoreUnavailableError() from exc
        raise
    return grant


def delete_grant(db: Session, grant_id: str) -> None:
    """
    Delete a grant by id.

    Raises:
        GrantNotFoundError: no row with this id
        PermissionStoreUnavailableError: role_permissions does not exist
    """
    try:
        result = db.execute(delete(RolePermission).where(RolePermission.id == grant_id))
    except DBAPIError as exc:
        if is_missing_relation_error(exc):
            raise PermissionStoreUnavailableError() from exc
        raise
    if result.rowcount == 0:
        raise GrantNotFoundError(f"Permission {grant_id} not found")
    logger.debug("Deleted permission grant %s", grant_id)
