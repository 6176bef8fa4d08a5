"""
Permission store adapter tests.

Tests cover:
- Empty results are not errors
- Uniqueness enforced at insert time, NULL scope ids compared equal
- Delete of unknown id
- Missing table reported as unavailable, not as "no rows"
"""

import pytest

from nmt_access.db.enums import Role
from nmt_access.db.models import RolePermission
from nmt_access.services import permission_store
from nmt_access.services.permission_store import (
    DuplicateGrantError,
    GrantNotFoundError,
    PermissionStoreUnavailableError,
)


def test_find_grants_empty_is_not_an_error(db):
    grants = permission_store.find_grants(
        db, Role.PROGRAM_ADMIN, permission_store.global_scope_filter()
    )

    assert grants == []


def test_insert_and_find_global_grant(db):
    grant = permission_store.insert_grant(db, Role.DRIVER, "view_trips")
    db.commit()

    assert grant.resource == "*"
    assert grant.program_id is None
    assert grant.corporate_client_id is None

    found = permission_store.find_grants(
        db, Role.DRIVER, permission_store.global_scope_filter(), permission="view_trips"
    )
    assert [g.id for g in found] == [grant.id]


def test_duplicate_global_grant_rejected(db):
    permission_store.insert_grant(db, Role.DRIVER, "view_trips")
    db.commit()

    with pytest.raises(DuplicateGrantError):
        permission_store.insert_grant(db, Role.DRIVER, "view_trips")

    assert db.query(RolePermission).count() == 1


def test_duplicate_program_grant_rejected(db, hierarchy):
    permission_store.insert_grant(db, Role.PROGRAM_ADMIN, "create_trip", program_id="acme_p1")
    db.commit()

    with pytest.raises(DuplicateGrantError):
        permission_store.insert_grant(
            db, Role.PROGRAM_ADMIN, "create_trip", program_id="acme_p1"
        )


def test_same_tuple_at_different_scopes_is_allowed(db, hierarchy):
    permission_store.insert_grant(db, Role.PROGRAM_ADMIN, "create_trip")
    permission_store.insert_grant(db, Role.PROGRAM_ADMIN, "create_trip", program_id="acme_p1")
    permission_store.insert_grant(db, Role.PROGRAM_ADMIN, "create_trip", program_id="acme_p2")
    permission_store.insert_grant(
        db, Role.PROGRAM_ADMIN, "create_trip", corporate_client_id="acme"
    )
    db.commit()

    assert db.query(RolePermission).count() == 4


def test_empty_scope_ids_stored_as_null(db):
    grant = permission_store.insert_grant(
        db, Role.DRIVER, "view_trips", program_id="", corporate_client_id=""
    )

    assert grant.program_id is None
    assert grant.corporate_client_id is None


def test_delete_grant(db):
    grant = permission_store.insert_grant(db, Role.DRIVER, "view_trips")
    db.commit()

    permission_store.delete_grant(db, grant.id)
    db.commit()

    assert permission_store.get_grant(db, grant.id) is None


def test_delete_unknown_grant_raises(db):
    with pytest.raises(GrantNotFoundError):
        permission_store.delete_grant(db, "does-not-exist")


# =============================================================================
# Scope Filters
# =============================================================================

@pytest.fixture
def scoped_grants(db, hierarchy):
    """One program_admin grant at every level plus a foreign program."""
    grants = {
        "global": permission_store.insert_grant(db, Role.PROGRAM_ADMIN, "view_trips"),
        "acme": permission_store.insert_grant(
            db, Role.PROGRAM_ADMIN, "view_reports", corporate_client_id="acme"
        ),
        "globex": permission_store.insert_grant(
            db, Role.PROGRAM_ADMIN, "view_reports", corporate_client_id="globex"
        ),
        "acme_p1": permission_store.insert_grant(
            db, Role.PROGRAM_ADMIN, "create_trips", program_id="acme_p1"
        ),
        "acme_p2": permission_store.insert_grant(
            db, Role.PROGRAM_ADMIN, "create_trips", program_id="acme_p2"
        ),
        "acme_p1_corp": permission_store.insert_grant(
            db,
            Role.PROGRAM_ADMIN,
            "manage_trips",
            program_id="acme_p1",
            corporate_client_id="acme",
        ),
    }
    db.commit()
    return grants


def _ids(grants):
    return {g.id for g in grants}


def test_program_filter(db, scoped_grants):
    found = permission_store.find_grants(
        db, Role.PROGRAM_ADMIN, permission_store.program_scope_filter("acme_p1")
    )

    assert _ids(found) == {
        scoped_grants["global"].id,
        scoped_grants["acme"].id,
        scoped_grants["globex"].id,
        scoped_grants["acme_p1"].id,
        scoped_grants["acme_p1_corp"].id,
    }


def test_corporate_filter_excludes_program_rows(db, scoped_grants):
    found = permission_store.find_grants(
        db, Role.PROGRAM_ADMIN, permission_store.corporate_scope_filter("acme")
    )

    assert _ids(found) == {scoped_grants["global"].id, scoped_grants["acme"].id}


def test_global_filter(db, scoped_grants):
    found = permission_store.find_grants(
        db, Role.PROGRAM_ADMIN, permission_store.global_scope_filter()
    )

    assert _ids(found) == {scoped_grants["global"].id}


def test_find_grants_filters_by_role(db, scoped_grants):
    assert permission_store.find_grants(
        db, Role.PROGRAM_USER, permission_store.program_scope_filter("acme_p1")
    ) == []


def test_find_grants_all_roles(db, scoped_grants):
    permission_store.insert_grant(db, Role.DRIVER, "view_trips")
    db.commit()

    found = permission_store.find_grants(db, None, permission_store.global_scope_filter())

    assert {g.role for g in found} == {"program_admin", "driver"}


# =============================================================================
# Missing Table
# =============================================================================

@pytest.fixture
def without_permissions_table(engine, db):
    RolePermission.__table__.drop(engine)


def test_find_grants_missing_table_is_unavailable(db, without_permissions_table):
    with pytest.raises(PermissionStoreUnavailableError) as exc_info:
        permission_store.find_grants(
            db, Role.DRIVER, permission_store.global_scope_filter()
        )

    assert exc_info.value.migration_required
    assert "role_permissions" in str(exc_info.value)


def test_insert_grant_missing_table_is_unavailable(db, without_permissions_table):
    with pytest.raises(PermissionStoreUnavailableError):
        permission_store.insert_grant(db, Role.DRIVER, "view_trips")


def test_delete_grant_missing_table_is_unavailable(db, without_permissions_table):
    with pytest.raises(PermissionStoreUnavailableError):
        permission_store.delete_grant(db, "any-id")
