# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import os
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set test environment before importing app
os.environ["RBAC_DATABASE_URL"] = "sqlite:///./test.db"
os.environ["RBAC_LOG_LEVEL"] = "DEBUG"

from src.api.deps import get_current_user_id
from src.database import get_db
from src.main import app
from src.models import Role, Site
from src.models.base import Base
from src.rbac.cache import EffectivePermissionCache
from src.rbac.locks import OrgLockRegistry
from src.services import assignment_service
from src.services.rbac_seed_service import seed_system_roles

# Test database setup
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Start every test with an empty permission cache and fresh locks."""
    EffectivePermissionCache.reset_instance()
    OrgLockRegistry.reset_instance()
    yield
    EffectivePermissionCache.reset_instance()
    OrgLockRegistry.reset_instance()


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def act_as(client):
    """Return a function that makes the client act as the given user."""

    def _act_as(user_id: uuid.UUID) -> TestClient:
        app.dependency_overrides[get_current_user_id] = lambda: user_id
        return client

    return _act_as


@pytest.fixture
def org_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def other_org_id() -> uuid.UUID:
    return uuid.uuid4()


def _create_site(db_session, organization_id: uuid.UUID, name: str) -> Site:
    site = Site(organization_id=organization_id, name=name)
    db_session.add(site)
    db_session.commit()
    db_session.refresh(site)
    return site


@pytest.fixture
def site(db_session, org_id) -> Site:
    """A site of the test organization."""
    return _create_site(db_session, org_id, "Main site")


@pytest.fixture
def second_site(db_session, org_id) -> Site:
    """Another site of the test organization."""
    return _create_site(db_session, org_id, "Second site")


@pytest.fixture
def foreign_site(db_session, other_org_id) -> Site:
    """A site owned by a different organization."""
    return _create_site(db_session, other_org_id, "Foreign site")


@pytest.fixture
def system_roles(db_session, org_id) -> dict[str, Role]:
    """Seed the system roles of the test organization, keyed by name."""
    return {role.name: role for role in seed_system_roles(db_session, org_id)}


@pytest.fixture
def owner_id(db_session, org_id, system_roles) -> uuid.UUID:
    """A user holding the Org Owner role."""
    user_id = uuid.uuid4()
    assignment_service.assign(
        db_session, org_id, user_id, system_roles["Org Owner"].id
    )
    return user_id


@pytest.fixture
def member_id(db_session, org_id, system_roles) -> uuid.UUID:
    """A user holding only the Org Member role."""
    user_id = uuid.uuid4()
    assignment_service.assign(
        db_session, org_id, user_id, system_roles["Org Member"].id
    )
    return user_id


@pytest.fixture
def owner_client(act_as, owner_id):
    """Client acting as the organization owner."""
    return act_as(owner_id)
