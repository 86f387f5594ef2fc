"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database, schema rebuilt for every test
- JWT token minting for authenticated tests
- HTTPX AsyncClient with proper headers
"""
import os
import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, Generator

# Must be set before the app (and its settings) are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TESTING"] = "1"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["PDF_API_URL"] = ""
os.environ["PDF_API_TOKEN"] = ""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from carehome.core.config import settings
from carehome.core.deps import COOKIE_NAME, get_db
from carehome.db.base import Base
from carehome.db.enums import Role
from carehome.db.models import Organization, Resident, User
from carehome.db.session import SessionLocal, engine
from carehome.main import app

from helpers import create_member, create_resident, mint_token


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Creates a database session on a fresh schema.

    App code commits freely; the whole schema is dropped after the test.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def local_storage(tmp_path, monkeypatch):
    """Keep stored documents inside the test's temp directory."""
    path = tmp_path / "storage"
    monkeypatch.setattr(settings, "STORAGE_BACKEND", "local")
    monkeypatch.setattr(settings, "LOCAL_STORAGE_PATH", str(path))
    return path


def _create_org(db: Session, name: str) -> Organization:
    org = Organization(
        id=uuid.uuid4(),
        name=name,
        slug=f"org-{uuid.uuid4().hex[:8]}",
    )
    db.add(org)
    db.commit()
    return org


@pytest.fixture(scope="function")
def test_org(db: Session) -> Organization:
    """Create a test organization."""
    return _create_org(db, "Oakview Care")


@pytest.fixture(scope="function")
def other_org(db: Session) -> Organization:
    """A second tenant for isolation tests."""
    return _create_org(db, "Riverside Care")


@pytest.fixture(scope="function")
def test_user(db: Session, test_org: Organization) -> User:
    """Create a test user with a manager membership in test_org."""
    return create_member(db, test_org, Role.MANAGER)


@pytest.fixture(scope="function")
def test_resident(db: Session, test_org: Organization) -> Resident:
    return create_resident(db, test_org)


@pytest.fixture(scope="function")
def other_resident(db: Session, other_org: Organization) -> Resident:
    """Resident owned by a different organization."""
    return create_resident(db, other_org, first_name="John", last_name="Doe", team_id="team-z")


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    user: User
    org: Organization
    token: str
    cookie_name: str = COOKIE_NAME


@pytest.fixture(scope="function")
def test_auth(test_user: User, test_org: Organization) -> TestAuth:
    """Create JWT token for test user."""
    return TestAuth(
        user=test_user,
        org=test_org,
        token=mint_token(test_user, test_org, Role.MANAGER),
    )


# =============================================================================
# Client Fixtures
# =============================================================================

def _override_db(db: Session) -> None:
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """
    Create unauthenticated AsyncClient for testing public endpoints.
    """
    _override_db(db)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def authed_client(
    db: Session,
    test_auth: TestAuth,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create authenticated AsyncClient with JWT cookie and CSRF header.
    """
    _override_db(db)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        cookies={test_auth.cookie_name: test_auth.token},
        headers={"X-Requested-With": "XMLHttpRequest"},  # CSRF header
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def assistant_client(
    db: Session,
    test_org: Organization,
) -> AsyncGenerator[AsyncClient, None]:
    """Authenticated client for a care assistant (no review or delete rights)."""
    user = create_member(db, test_org, Role.CARE_ASSISTANT)
    _override_db(db)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        cookies={COOKIE_NAME: mint_token(user, test_org, Role.CARE_ASSISTANT)},
        headers={"X-Requested-With": "XMLHttpRequest"},
    ) as c:
        yield c
    app.dependency_overrides.clear()
