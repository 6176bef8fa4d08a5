"""Data-access scope: which corporate clients, programs and locations a role may see.

Super admin and corporate admin get an explicit, authoritative scope computed
from the hierarchy. Program staff and drivers get DEFER_TO_ASSIGNMENT: their
scope comes from their own assignment (primary + authorized programs), see
get_assignment_scope.

Scopes are computed per request and never cached.
"""

from dataclasses import dataclass
from enum import Enum

from sqlalchemy import select
from sqlalchemy.orm import Session

from nmt_access.db.enums import ROLES_SCOPED_BY_ASSIGNMENT, Role
from nmt_access.db.models import CorporateClient, Program, User


class ScopeKind(str, Enum):
    EXPLICIT = "explicit"
    DEFER_TO_ASSIGNMENT = "defer_to_assignment"


@dataclass(frozen=True)
class DataAccessScope:
    """
    Visible records for a role.

    For EXPLICIT scopes the id sets are authoritative. For
    DEFER_TO_ASSIGNMENT they are empty and must be resolved from the user's
    assignment records.
    """

    kind: ScopeKind
    corporate_client_ids: frozenset[str] = frozenset()
    program_ids: frozenset[str] = frozenset()
    locations_unrestricted: bool = False

    @property
    def is_explicit(self) -> bool:
        return self.kind == ScopeKind.EXPLICIT

    def allows_program(self, program_id: str) -> bool:
        return program_id in self.program_ids

    def allows_corporate_client(self, corporate_client_id: str) -> bool:
        return corporate_client_id in self.corporate_client_ids


EMPTY_SCOPE = DataAccessScope(kind=ScopeKind.EXPLICIT)
DEFERRED_SCOPE = DataAccessScope(kind=ScopeKind.DEFER_TO_ASSIGNMENT)


def get_data_access_scope(
    db: Session,
    role: Role | str,
    corporate_client_id: str | None = None,
) -> DataAccessScope:
    """Compute the data-access scope for a role and its corporate claim."""
    role = Role(role)

    if role == Role.SUPER_ADMIN:
        corporate_ids = db.execute(select(CorporateClient.id)).scalars().all()
        program_ids = db.execute(select(Program.id)).scalars().all()
        return DataAccessScope(
            kind=ScopeKind.EXPLICIT,
            corporate_client_ids=frozenset(corporate_ids),
            program_ids=frozenset(program_ids),
            locations_unrestricted=True,
        )

    if role == Role.CORPORATE_ADMIN:
        if not corporate_client_id:
            return EMPTY_SCOPE
        program_ids = db.execute(
            select(Program.id).where(Program.corporate_client_id == corporate_client_id)
        ).scalars().all()
        return DataAccessScope(
            kind=ScopeKind.EXPLICIT,
            corporate_client_ids=frozenset({corporate_client_id}),
            program_ids=frozenset(program_ids),
            locations_unrestricted=True,
        )

    return DEFERRED_SCOPE


def get_assignment_scope(user: User) -> DataAccessScope:
    """
    Resolve a deferred scope from a user's own assignment.

    Program admins and program users see their primary program plus any
    authorized programs. Drivers see nothing through this path; their trips
    are filtered by driver assignment.
    """
    role = Role(user.role)
    if role not in ROLES_SCOPED_BY_ASSIGNMENT:
        raise ValueError(f"Role {role.value} is not scoped by assignment")

    if role == Role.DRIVER:
        return EMPTY_SCOPE

    program_ids: set[str] = set()
    if user.primary_program_id:
        program_ids.add(user.primary_program_id)
    program_ids.update(p for p in (user.authorized_programs or []) if p)

    corporate_ids = {user.corporate_client_id} if user.corporate_client_id else set()
    return DataAccessScope(
        kind=ScopeKind.EXPLICIT,
        corporate_client_ids=frozenset(corporate_ids),
        program_ids=frozenset(program_ids),
    )


def resolve_user_scope(db: Session, user: User) -> DataAccessScope:
    """Data-access scope for a user, resolving deferred scopes from assignment."""
    scope = get_data_access_scope(db, user.role, user.corporate_client_id)
    if scope.kind == ScopeKind.DEFER_TO_ASSIGNMENT:
        return get_assignment_scope(user)
    return scope


def can_access_program_by_corporate_client(
    db: Session,
    role: Role | str,
    user_corporate_client_id: str | None,
    requested_program_id: str,
) -> bool:
    """
    Whether a role's corporate claim covers a requested program.

    Super admin: always. Corporate admin: only when the program belongs to
    their corporate client. Everyone else: never through this path.
    """
    role = Role(role)
    if role == Role.SUPER_ADMIN:
        return True
    if role != Role.CORPORATE_ADMIN or not user_corporate_client_id:
        return False

    program = db.get(Program, requested_program_id)
    if program is None:
        return False
    return program.corporate_client_id == user_corporate_client_id
