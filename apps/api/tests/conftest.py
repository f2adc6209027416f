"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database, fresh schema per test
- User/client/case factories
- HTTPX AsyncClient with CSRF header and acting-user header
"""
import os
import uuid
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator, Generator

# Must be set before the app (and its rate limiter) is imported
os.environ["TESTING"] = "1"
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from casedesk.core.config import settings
from casedesk.core.deps import get_db
from casedesk.db.base import Base
from casedesk.db.models import Case, Client, User
from casedesk.main import app


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Session on a private in-memory database.

    StaticPool keeps one connection so the schema survives across the
    threads FastAPI uses for sync endpoints.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Reset feature flags that individual tests toggle."""
    monkeypatch.setattr(settings, "ALLOW_ANONYMOUS_FALLBACK", True)
    monkeypatch.setattr(settings, "STRICT_STAGE_VALIDATION", False)
    monkeypatch.setattr(settings, "URGENCY_POLICY", "working_days")
    monkeypatch.setattr(settings, "PIPELINE_STAGES", "")
    monkeypatch.setattr(settings, "CASE_NUMBER_PREFIX", "HF-")
    monkeypatch.setattr(settings, "CASE_NUMBER_WIDTH", 4)
    monkeypatch.setattr(settings, "LEGACY_CASE_NUMBER_PREFIXES", "HF-,CASE-")


# =============================================================================
# Factories
# =============================================================================

@pytest.fixture(scope="function")
def test_user(db: Session) -> User:
    """Create a test advisor."""
    user = User(
        id=uuid.uuid4(),
        email=f"advisor-{uuid.uuid4().hex[:8]}@test.com",
        display_name="Test Advisor",
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture(scope="function")
def test_client_record(db: Session) -> Client:
    """Create a test client."""
    client = Client(
        id=uuid.uuid4(),
        name="Alex Morgan",
        email="alex@example.com",
    )
    db.add(client)
    db.commit()
    return client


@pytest.fixture(scope="function")
def make_case(db: Session, test_user: User, test_client_record: Client):
    """Factory for cases attached to the test advisor and client."""

    def _make_case(
        title: str = "Remortgage",
        status: str = "Contact",
        deadline: date | None = None,
        **fields,
    ) -> Case:
        case = Case(
            title=title,
            status=status,
            deadline=deadline,
            value=fields.pop("value", Decimal("250000")),
            client_id=test_client_record.id,
            advisor_id=test_user.id,
            **fields,
        )
        db.add(case)
        db.commit()
        db.refresh(case)
        return case

    return _make_case


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient with CSRF header but no acting user.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-Requested-With": "XMLHttpRequest"},  # CSRF header
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def authed_client(db: Session, test_user: User) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient acting as test_user.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={
            "X-Requested-With": "XMLHttpRequest",
            "X-User-Id": str(test_user.id),
        },
    ) as c:
        yield c

    app.dependency_overrides.clear()
