"""Application users."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from nmt_access.db.base import Base


class User(Base):
    """
    Application user.

    `role` is stored as a plain string and validated against the Role enum
    when read. Program staff are scoped by `primary_program_id` plus
    `authorized_programs`; corporate admins by `corporate_client_id`.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_corporate_client", "corporate_client_id"),
    )

    user_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    corporate_client_id: Mapped[str | None] = mapped_column(
        String(50),
        ForeignKey("corporate_clients.id", ondelete="SET NULL"),
        nullable=True,
    )
    primary_program_id: Mapped[str | None] = mapped_column(
        String(50),
        ForeignKey("programs.id", ondelete="SET NULL"),
        nullable=True,
    )
    authorized_programs: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
