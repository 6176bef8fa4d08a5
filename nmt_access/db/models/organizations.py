"""Tenant hierarchy: corporate clients, programs and locations."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nmt_access.db.base import Base


class CorporateClient(Base):
    """
    Top-level tenant organization.

    Owns one or more programs; every program-scoped record belongs to
    exactly one corporate client through its program.
    """

    __tablename__ = "corporate_clients"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    programs: Mapped[list["Program"]] = relationship(
        back_populates="corporate_client", cascade="all, delete-orphan"
    )


class Program(Base):
    """An operating unit within a corporate client."""

    __tablename__ = "programs"
    __table_args__ = (
        Index("idx_programs_corporate_client", "corporate_client_id"),
    )

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    corporate_client_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("corporate_clients.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    corporate_client: Mapped[CorporateClient] = relationship(back_populates="programs")
    locations: Mapped[list["Location"]] = relationship(
        back_populates="program", cascade="all, delete-orphan"
    )


class Location(Base):
    """A physical site operated by a program."""

    __tablename__ = "locations"
    __table_args__ = (
        Index("idx_locations_program", "program_id"),
    )

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    program_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("programs.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    program: Mapped[Program] = relationship(back_populates="locations")
