"""Effective-permission resolution over the tenant hierarchy.

Grants live in role_permissions at one of three levels:
- global: no program, no corporate client
- corporate: corporate client only
- program: program id set

A check at program P sees P's grants plus every program-less grant; a check
at corporate client C sees C's grants plus global grants; anything else sees
global grants only. Super admin always resolves to the global scope.

Missing grant: False (deny). Missing store: PermissionStoreUnavailableError,
never a denial.
"""

import logging

from sqlalchemy import and_
from sqlalchemy.orm import Session

from nmt_access.core.config import settings
from nmt_access.core.permissions import legacy_has_permission
from nmt_access.core.scope import OrganizationalScope, resolve_scope
from nmt_access.core.structured_logging import build_log_context
from nmt_access.db.enums import PermissionSource, Role, ScopeLevel
from nmt_access.db.models import Program, RolePermission, User
from nmt_access.schemas.permission import EffectivePermission
from nmt_access.services import permission_store
from nmt_access.services.permission_store import (
    DuplicateGrantError,
    GrantNotFoundError,
    PermissionStoreUnavailableError,
)

logger = logging.getLogger(__name__)


class UserNotFoundError(Exception):
    """No user with the given id."""

    pass


class AlreadyGrantedError(DuplicateGrantError):
    """The role already holds this permission at this scope."""

    pass


class InvalidGrantScopeError(Exception):
    """Grant scope names an unknown program or a program outside the corporate client."""

    pass


# =============================================================================
# Helpers
# =============================================================================

def get_user_role(db: Session, user_id: str) -> Role:
    """
    Look up a user's role.

    Raises:
        UserNotFoundError: unknown user id
    """
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(f"User {user_id} not found")
    return Role(user.role)


def grant_source(grant: RolePermission) -> PermissionSource:
    """Hierarchy level a stored grant belongs to."""
    if grant.program_id:
        return PermissionSource.PROGRAM
    if grant.corporate_client_id:
        return PermissionSource.CORPORATE
    return PermissionSource.GLOBAL


def _level_filter(level: ScopeLevel | str, scope: OrganizationalScope):
    level = ScopeLevel(level)
    if level == ScopeLevel.PROGRAM and scope.program_id:
        return permission_store.program_scope_filter(scope.program_id)
    if level == ScopeLevel.CORPORATE and scope.corporate_client_id:
        return permission_store.corporate_scope_filter(scope.corporate_client_id)
    return permission_store.global_scope_filter()


def _check_filter(scope: OrganizationalScope):
    # Program id wins when both are supplied
    if scope.program_id:
        return permission_store.program_scope_filter(scope.program_id)
    if scope.corporate_client_id:
        return permission_store.corporate_scope_filter(scope.corporate_client_id)
    return permission_store.global_scope_filter()


def _to_effective(grants: list[RolePermission]) -> list[EffectivePermission]:
    return [
        EffectivePermission(
            id=grant.id,
            role=grant.role,
            permission=grant.permission,
            resource=grant.resource,
            program_id=grant.program_id,
            corporate_client_id=grant.corporate_client_id,
            created_at=grant.created_at,
            source=grant_source(grant),
        )
        for grant in grants
    ]


# =============================================================================
# Permission Resolution
# =============================================================================

def get_effective_permissions(
    db: Session,
    user_id: str,
    level: ScopeLevel | str,
    corporate_client_id: str | None = None,
    program_id: str | None = None,
) -> list[EffectivePermission]:
    """
    Grants visible to a user's role at a hierarchy level.

    A level whose id is missing falls back to the global query.

    Raises:
        UserNotFoundError: unknown user id
        PermissionStoreUnavailableError: role_permissions does not exist
    """
    role = get_user_role(db, user_id)
    scope = resolve_scope(role, corporate_client_id, program_id)
    grants = permission_store.find_grants(db, role, _level_filter(level, scope))
    return _to_effective(grants)


def check_permission(
    db: Session,
    user_id: str,
    permission: str,
    resource: str = "*",
    program_id: str | None = None,
    corporate_client_id: str | None = None,
) -> bool:
    """
    Check whether a user's role holds `permission` on `resource` at a scope.

    Returns False when no grant matches.

    Raises:
        UserNotFoundError: unknown user id
        PermissionStoreUnavailableError: role_permissions does not exist
    """
    role = get_user_role(db, user_id)
    scope = resolve_scope(role, corporate_client_id, program_id)
    grants = permission_store.find_grants(
        db,
        role,
        _check_filter(scope),
        permission=permission,
        resource=resource,
        limit=1,
    )
    return bool(grants)


def has_permission(
    db: Session,
    user_id: str,
    permission: str,
    resource: str = "*",
    program_id: str | None = None,
    corporate_client_id: str | None = None,
) -> bool:
    """
    check_permission with the legacy role policy as a fallback.

    When role_permissions is missing and PERMISSIONS_LEGACY_FALLBACK is on,
    the answer comes from the hard-coded role map instead of an error.
    """
    try:
        return check_permission(
            db,
            user_id,
            permission,
            resource=resource,
            program_id=program_id,
            corporate_client_id=corporate_client_id,
        )
    except PermissionStoreUnavailableError:
        if not settings.PERMISSIONS_LEGACY_FALLBACK:
            raise
        # Failed statement may have aborted the transaction (PostgreSQL)
        db.rollback()
        role = get_user_role(db, user_id)
        logger.warning(
            "Permission store unavailable; using legacy role policy for %s",
            permission,
            extra=build_log_context(
                user_id=user_id,
                role=role.value,
                corporate_client_id=corporate_client_id,
                program_id=program_id,
            ),
        )
        return legacy_has_permission(role, permission)


# =============================================================================
# Grant Management
# =============================================================================

def list_grants(
    db: Session,
    level: ScopeLevel | str = ScopeLevel.GLOBAL,
    corporate_client_id: str | None = None,
    program_id: str | None = None,
    visible_to_corporate_client_id: str | None = None,
) -> list[EffectivePermission]:
    """
    All roles' grants visible at a hierarchy level (admin listing).

    `visible_to_corporate_client_id` pins the listing to one tenant: rows
    tagged with any other corporate client are dropped, even where the level
    filter would admit them.
    """
    scope = OrganizationalScope(
        corporate_client_id=corporate_client_id or None,
        program_id=program_id or None,
    )
    scope_filter = _level_filter(level, scope)
    if visible_to_corporate_client_id:
        scope_filter = and_(
            scope_filter,
            permission_store.corporate_client_visibility_filter(visible_to_corporate_client_id),
        )
    grants = permission_store.find_grants(db, None, scope_filter)
    return _to_effective(grants)


def resolve_grant_scope(
    db: Session,
    program_id: str | None,
    corporate_client_id: str | None,
) -> tuple[str | None, str | None]:
    """
    Validate the (program, corporate client) pair of a new grant.

    A program grant is tagged with the program's own corporate client; a
    supplied corporate id that disagrees is rejected.

    Raises:
        InvalidGrantScopeError: unknown program or mismatched corporate client
    """
    program_id = program_id or None
    corporate_client_id = corporate_client_id or None
    if program_id is None:
        return None, corporate_client_id

    program = db.get(Program, program_id)
    if program is None:
        raise InvalidGrantScopeError(f"Program {program_id} not found")
    if corporate_client_id and corporate_client_id != program.corporate_client_id:
        raise InvalidGrantScopeError(
            f"Program {program_id} does not belong to corporate client {corporate_client_id}"
        )
    return program_id, program.corporate_client_id


def grant_permission(
    db: Session,
    role: Role | str,
    permission: str,
    resource: str = "*",
    program_id: str | None = None,
    corporate_client_id: str | None = None,
    actor_user_id: str | None = None,
) -> EffectivePermission:
    """
    Grant a permission to a role at a scope.

    Raises:
        InvalidGrantScopeError: program unknown or outside the corporate client
        AlreadyGrantedError: identical grant already exists
        PermissionStoreUnavailableError: role_permissions does not exist
    """
    role = Role(role)
    program_id, corporate_client_id = resolve_grant_scope(db, program_id, corporate_client_id)
    try:
        grant = permission_store.insert_grant(
            db,
            role,
            permission,
            resource=resource,
            program_id=program_id,
            corporate_client_id=corporate_client_id,
        )
    except DuplicateGrantError as exc:
        raise AlreadyGrantedError(str(exc)) from exc

    logger.info(
        "Granted %s on %s to %s",
        permission,
        grant.resource,
        role.value,
        extra=build_log_context(
            user_id=actor_user_id,
            corporate_client_id=grant.corporate_client_id,
            program_id=grant.program_id,
        ),
    )
    return _to_effective([grant])[0]


def revoke_permission(
    db: Session,
    grant_id: str,
    actor_user_id: str | None = None,
) -> bool:
    """
    Revoke a grant by id.

    Idempotent: revoking an id that does not exist succeeds and returns False.
    Returns True when a row was deleted.

    Raises:
        PermissionStoreUnavailableError: role_permissions does not exist
    """
    try:
        permission_store.delete_grant(db, grant_id)
    except GrantNotFoundError:
        logger.info(
            "Revoke of unknown permission %s ignored",
            grant_id,
            extra=build_log_context(user_id=actor_user_id),
        )
        return False

    logger.info(
        "Revoked permission %s",
        grant_id,
        extra=build_log_context(user_id=actor_user_id),
    )
    return True
