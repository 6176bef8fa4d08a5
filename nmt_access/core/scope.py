"""Scope resolution for permission checks.

Shapes the organizational coordinate a check is evaluated at. Performs no
existence validation; that is the caller's concern.
"""

from dataclasses import dataclass

from nmt_access.db.enums import Role


@dataclass(frozen=True)
class OrganizationalScope:
    """(corporate client, program, location) coordinate; all None means global."""

    corporate_client_id: str | None = None
    program_id: str | None = None
    location_id: str | None = None

    @property
    def is_global(self) -> bool:
        return (
            self.corporate_client_id is None
            and self.program_id is None
            and self.location_id is None
        )


GLOBAL_SCOPE = OrganizationalScope()


def resolve_scope(
    role: Role | str,
    corporate_client_id: str | None = None,
    program_id: str | None = None,
    location_id: str | None = None,
) -> OrganizationalScope:
    """
    Resolve the scope a check for `role` must be evaluated at.

    Super admin is scope-transcendent and always resolves to global.
    Every other role gets exactly the ids supplied; empty strings count as absent.
    """
    if Role(role) == Role.SUPER_ADMIN:
        return GLOBAL_SCOPE

    return OrganizationalScope(
        corporate_client_id=corporate_client_id or None,
        program_id=program_id or None,
        location_id=location_id or None,
    )
