"""
Fixtures for integration tests.

Provides:
- In-memory SQLite database shared by the app and the consumers
- Recording and failing event publishers in place of Kafka
- Test clients for the FastAPI app in direct and outbox publishing modes
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, List

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.main import app
from src.core.dependencies import get_event_publisher, get_outbox_enabled
from src.domain.entities import ProposalEvent
from src.domain.exceptions import PublishException
from src.domain.interfaces import EventPublisher
from src.infrastructure.database import Base, get_db_session


# =============================================================================
# Mock Publishers
# =============================================================================

class MockEventPublisher(EventPublisher):
    """Publisher that records events instead of writing to Kafka."""

    def __init__(self, fail_mode: bool = False):
        self.fail_mode = fail_mode
        self.call_count = 0
        self.events: List[ProposalEvent] = []

    async def publish(self, event: ProposalEvent) -> ProposalEvent:
        self.call_count += 1

        if self.fail_mode:
            raise PublishException(
                "Timed out writing to proposal-events",
                topics=["proposal-events", "audit-logs"],
            )

        event = event.with_id()
        self.events.append(event)
        return event

    def types(self) -> List[str]:
        return [e.type.value for e in self.events]


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def session_scope(session_factory):
    """Transactional scope matching DatabaseSessionManager.session()."""

    @asynccontextmanager
    async def scope() -> AsyncGenerator[AsyncSession, None]:
        session = session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    return scope


# =============================================================================
# Mock Publisher Fixtures
# =============================================================================

@pytest.fixture
def mock_publisher() -> MockEventPublisher:
    return MockEventPublisher()


@pytest.fixture
def failing_publisher() -> MockEventPublisher:
    """Create a publisher whose writes always time out."""
    return MockEventPublisher(fail_mode=True)


# =============================================================================
# App Client Fixtures
# =============================================================================

@asynccontextmanager
async def _app_client(session_scope, publisher, outbox_enabled: bool):
    async def override_get_db_session():
        async with session_scope() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    app.dependency_overrides[get_outbox_enabled] = lambda: outbox_enabled

    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(session_scope, mock_publisher) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client publishing directly to a recording publisher.

    This client:
    - Uses an in-memory SQLite database
    - Records published events on mock_publisher
    """
    async with _app_client(session_scope, mock_publisher, outbox_enabled=False) as ac:
        yield ac


@pytest_asyncio.fixture
async def client_with_failing_publisher(
    session_scope,
    failing_publisher,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client whose event writes always fail."""
    async with _app_client(session_scope, failing_publisher, outbox_enabled=False) as ac:
        yield ac


@pytest_asyncio.fixture
async def outbox_client(session_scope, failing_publisher) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client in outbox mode with an unavailable channel."""
    async with _app_client(session_scope, failing_publisher, outbox_enabled=True) as ac:
        yield ac


# =============================================================================
# Helper Fixtures
# =============================================================================

@pytest.fixture
def proposal_request() -> dict:
    """Request body for a proposal using the default chain."""
    return {
        "title": "Warehouse roof",
        "applicant_name": "Acme Corp",
        "amount": "120000.00",
        "description": "Full roof replacement for warehouse 3",
    }
