"""
Test configuration and fixtures.

Provides:
- Per-test in-memory SQLite database with the full schema
- Seeded tenant hierarchy (two corporate clients, three programs)
- User factory and session token minting
- HTTPX AsyncClient with session cookie and CSRF header
"""
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import AsyncGenerator, Callable, Generator

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["PERMISSIONS_LEGACY_FALLBACK"] = "true"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from nmt_access.core.deps import COOKIE_NAME, get_db
from nmt_access.core.security import create_session_token
from nmt_access.db.base import Base
from nmt_access.db.enums import Role, TripStatus, TripType
from nmt_access.db.models import CorporateClient, Location, Program, Trip, User
from nmt_access.main import app


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database per test, shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine: Engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


# =============================================================================
# Tenant Hierarchy
# =============================================================================

@dataclass
class Hierarchy:
    acme: CorporateClient
    globex: CorporateClient
    acme_p1: Program
    acme_p2: Program
    globex_p1: Program
    acme_p1_depot: Location


@pytest.fixture(scope="function")
def hierarchy(db: Session) -> Hierarchy:
    """Two corporate clients: acme (two programs) and globex (one program)."""
    acme = CorporateClient(id="acme", name="Acme Health")
    globex = CorporateClient(id="globex", name="Globex Care")
    acme_p1 = Program(id="acme_p1", corporate_client_id="acme", name="Acme North")
    acme_p2 = Program(id="acme_p2", corporate_client_id="acme", name="Acme South")
    globex_p1 = Program(id="globex_p1", corporate_client_id="globex", name="Globex Metro")
    depot = Location(id="acme_p1_depot", program_id="acme_p1", name="North Depot")
    db.add_all([acme, globex])
    db.flush()
    db.add_all([acme_p1, acme_p2, globex_p1])
    db.flush()
    db.add(depot)
    db.commit()
    return Hierarchy(acme, globex, acme_p1, acme_p2, globex_p1, depot)


@pytest.fixture(scope="function")
def make_user(db: Session, hierarchy: Hierarchy) -> Callable[..., User]:
    """Factory creating committed users with a role and assignment."""
    def factory(
        role: Role,
        corporate_client_id: str | None = None,
        primary_program_id: str | None = None,
        authorized_programs: list[str] | None = None,
    ) -> User:
        suffix = uuid.uuid4().hex[:8]
        user = User(
            user_id=f"{role.value}_{suffix}",
            user_name=f"Test {role.value}",
            email=f"{role.value}-{suffix}@test.com",
            role=role.value,
            corporate_client_id=corporate_client_id,
            primary_program_id=primary_program_id,
            authorized_programs=authorized_programs,
        )
        db.add(user)
        db.commit()
        return user
    return factory


@pytest.fixture(scope="function")
def make_trip(db: Session, hierarchy: Hierarchy) -> Callable[..., Trip]:
    """Factory creating committed trips."""
    def factory(
        program_id: str = "acme_p1",
        status: TripStatus = TripStatus.SCHEDULED,
        trip_type: TripType = TripType.ONE_WAY,
        driver_id: str | None = None,
    ) -> Trip:
        trip = Trip(
            program_id=program_id,
            driver_id=driver_id,
            trip_type=trip_type.value,
            pickup_address="100 Main St",
            dropoff_address="200 Clinic Rd",
            scheduled_pickup_time=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
            status=status.value,
        )
        db.add(trip)
        db.commit()
        return trip
    return factory


# =============================================================================
# Client Fixtures
# =============================================================================

def session_cookie_for(user: User) -> dict[str, str]:
    token = create_session_token(user_id=user.user_id)
    return {COOKIE_NAME: token}


@pytest.fixture(scope="function")
def client_for(db: Session) -> Generator[Callable[[User | None], AsyncClient], None, None]:
    """
    Build AsyncClients bound to the test database.

    Pass a user for an authenticated client (session cookie + CSRF header),
    or None for an anonymous one.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    def factory(user: User | None = None) -> AsyncClient:
        cookies = session_cookie_for(user) if user else None
        return AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            cookies=cookies,
            headers={"X-Requested-With": "XMLHttpRequest"},  # CSRF header
        )

    yield factory

    app.dependency_overrides.clear()
