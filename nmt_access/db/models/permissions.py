"""Role permission grants."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from nmt_access.db.base import Base


class RolePermission(Base):
    """
    A permission granted to a role at a point in the tenant hierarchy.

    - program_id and corporate_client_id both NULL: global grant
    - corporate_client_id only: corporate grant
    - program_id set: program grant

    Rows are never updated in place; changes are revoke + grant.
    """

    __tablename__ = "role_permissions"
    __table_args__ = (
        Index("idx_role_permissions_role", "role"),
        Index("idx_role_permissions_program", "program_id"),
        Index("idx_role_permissions_corporate_client", "corporate_client_id"),
    )

    id: Mapped[str] = mapped_column(
        String(50), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    permission: Mapped[str] = mapped_column(String(100), nullable=False)
    resource: Mapped[str] = mapped_column(String(50), nullable=False, default="*")
    program_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    corporate_client_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)


# NULL scope ids compare equal for uniqueness, so one global grant per tuple.
Index(
    "uq_role_permissions_grant",
    RolePermission.role,
    RolePermission.permission,
    RolePermission.resource,
    func.coalesce(RolePermission.program_id, ""),
    func.coalesce(RolePermission.corporate_client_id, ""),
    unique=True,
)
