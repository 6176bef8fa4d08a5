"""Pydantic schemas for permission grants and access scope."""

from datetime import datetime

from pydantic import BaseModel, Field

from nmt_access.db.enums import PermissionSource, Role, ScopeLevel


class GrantCreate(BaseModel):
    """Request to grant a permission to a role."""
    role: Role
    permission: str = Field(..., min_length=1, max_length=100)
    resource: str = Field("*", min_length=1, max_length=50)
    program_id: str | None = None
    corporate_client_id: str | None = None


class GrantRead(BaseModel):
    """Stored permission grant."""
    id: str
    role: str
    permission: str
    resource: str
    program_id: str | None
    corporate_client_id: str | None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class EffectivePermission(GrantRead):
    """A grant as seen from a hierarchy level, tagged with where it came from."""
    source: PermissionSource


class PermissionCheckRead(BaseModel):
    """Answer to a single permission check."""
    permission: str
    resource: str
    allowed: bool


class EffectivePermissionsRead(BaseModel):
    """Effective permissions of the current user at a hierarchy level."""
    level: ScopeLevel
    corporate_client_id: str | None = None
    program_id: str | None = None
    permissions: list[EffectivePermission]


class DataAccessScopeRead(BaseModel):
    """Records the current user may see."""
    kind: str
    corporate_client_ids: list[str]
    program_ids: list[str]
    locations_unrestricted: bool


class PermissionInfo(BaseModel):
    """Registered permission metadata."""
    key: str
    label: str
    category: str
    cross_org: bool
