"""Permissions router - API endpoints for hierarchical role permissions.

Endpoints for:
- Listing registered permissions
- Effective permissions and single checks for the current user
- Listing, granting and revoking role grants (super/corporate admin)
- The current user's data-access scope
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from nmt_access.core.deps import (
    get_current_session,
    get_db,
    require_csrf_header,
    require_roles,
)
from nmt_access.core.permissions import PERMISSION_REGISTRY
from nmt_access.db.enums import ROLES_CAN_MANAGE_PERMISSIONS, Role, ScopeLevel
from nmt_access.db.models import User
from nmt_access.schemas.auth import UserSession
from nmt_access.schemas.permission import (
    DataAccessScopeRead,
    EffectivePermission,
    EffectivePermissionsRead,
    GrantCreate,
    PermissionCheckRead,
    PermissionInfo,
)
from nmt_access.services import data_scope_service, permission_service, permission_store


router = APIRouter(prefix="/permissions", tags=["Permissions"])


def _ensure_manageable_scope(
    db: Session,
    session: UserSession,
    corporate_client_id: str | None,
    program_id: str | None,
) -> None:
    """Corporate admins may only manage grants inside their own corporate client."""
    if session.role == Role.SUPER_ADMIN:
        return
    if program_id:
        if not data_scope_service.can_access_program_by_corporate_client(
            db, session.role, session.corporate_client_id, program_id
        ):
            raise HTTPException(403, "Program is outside your corporate client")
        return
    if not corporate_client_id or corporate_client_id != session.corporate_client_id:
        raise HTTPException(403, "Grants must be scoped to your corporate client")


# =============================================================================
# Available Permissions
# =============================================================================

@router.get("/available", response_model=list[PermissionInfo])
def list_available_permissions(
    session: UserSession = Depends(get_current_session),
):
    """List all registered permissions with metadata."""
    return [
        PermissionInfo(
            key=p.key,
            label=p.label,
            category=p.category.value,
            cross_org=p.cross_org,
        )
        for p in PERMISSION_REGISTRY.values()
    ]


# =============================================================================
# Current User
# =============================================================================

@router.get("/effective", response_model=EffectivePermissionsRead)
def get_effective_permissions(
    level: ScopeLevel = ScopeLevel.GLOBAL,
    corporate_client_id: str | None = None,
    program_id: str | None = None,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """
    Effective permissions of the current user at a hierarchy level.

    Missing ids default to the user's own corporate client / primary program.
    """
    corporate_client_id = corporate_client_id or session.corporate_client_id
    program_id = program_id or session.program_id
    permissions = permission_service.get_effective_permissions(
        db,
        session.user_id,
        level,
        corporate_client_id=corporate_client_id,
        program_id=program_id,
    )
    return EffectivePermissionsRead(
        level=level,
        corporate_client_id=corporate_client_id,
        program_id=program_id,
        permissions=permissions,
    )


@router.get("/check", response_model=PermissionCheckRead)
def check_permission(
    permission: str = Query(..., min_length=1),
    resource: str = "*",
    program_id: str | None = None,
    corporate_client_id: str | None = None,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """Check one permission for the current user at an explicit scope."""
    allowed = permission_service.check_permission(
        db,
        session.user_id,
        permission,
        resource=resource,
        program_id=program_id,
        corporate_client_id=corporate_client_id,
    )
    return PermissionCheckRead(permission=permission, resource=resource, allowed=allowed)


@router.get("/scope", response_model=DataAccessScopeRead)
def get_data_access_scope(
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """Corporate clients and programs visible to the current user."""
    user = db.get(User, session.user_id)
    scope = data_scope_service.resolve_user_scope(db, user)
    return DataAccessScopeRead(
        kind=scope.kind.value,
        corporate_client_ids=sorted(scope.corporate_client_ids),
        program_ids=sorted(scope.program_ids),
        locations_unrestricted=scope.locations_unrestricted,
    )


# =============================================================================
# Grant Management
# =============================================================================

@router.get("/all", response_model=list[EffectivePermission])
def list_grants(
    level: ScopeLevel = ScopeLevel.GLOBAL,
    corporate_client_id: str | None = None,
    program_id: str | None = None,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_roles(ROLES_CAN_MANAGE_PERMISSIONS)),
):
    """
    All roles' grants visible at a hierarchy level.

    Corporate admins are pinned to their own corporate client: rows tagged
    with another corporate client are never returned.
    """
    visible_to = None
    if session.role == Role.CORPORATE_ADMIN:
        if not session.corporate_client_id:
            raise HTTPException(403, "No corporate client assigned")
        visible_to = session.corporate_client_id
        if program_id:
            _ensure_manageable_scope(db, session, None, program_id)
        else:
            corporate_client_id = visible_to
    return permission_service.list_grants(
        db,
        level,
        corporate_client_id=corporate_client_id,
        program_id=program_id,
        visible_to_corporate_client_id=visible_to,
    )


@router.post(
    "",
    response_model=EffectivePermission,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def grant_permission(
    data: GrantCreate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_roles(ROLES_CAN_MANAGE_PERMISSIONS)),
):
    """Grant a permission to a role at a scope."""
    _ensure_manageable_scope(db, session, data.corporate_client_id, data.program_id)
    if session.role != Role.SUPER_ADMIN and data.role == Role.SUPER_ADMIN:
        raise HTTPException(403, "Only super admins can grant super admin permissions")

    grant = permission_service.grant_permission(
        db,
        data.role,
        data.permission,
        resource=data.resource,
        program_id=data.program_id,
        corporate_client_id=data.corporate_client_id,
        actor_user_id=session.user_id,
    )
    db.commit()
    return grant


@router.delete("/{grant_id}", dependencies=[Depends(require_csrf_header)])
def revoke_permission(
    grant_id: str,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_roles(ROLES_CAN_MANAGE_PERMISSIONS)),
):
    """Revoke a grant. Revoking an unknown id succeeds with deleted=false."""
    grant = permission_store.get_grant(db, grant_id)
    if grant is not None:
        _ensure_manageable_scope(db, session, grant.corporate_client_id, grant.program_id)

    deleted = permission_service.revoke_permission(db, grant_id, actor_user_id=session.user_id)
    db.commit()
    return {"id": grant_id, "deleted": deleted}
