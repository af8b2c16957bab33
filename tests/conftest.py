"""
PURPOSE: Pytest fixtures for alert relay tests.

Provides shared test data and wiring including:
- Async in-memory SQLite session for store tests
- FastAPI app + httpx client with the database dependency overridden
- A fresh, process-local EventBus per test with event capture
- A disabled notification dispatcher
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from alert_relay.core.rate_limit import limiter
from alert_relay.db.base import Base
from alert_relay.db.engine import get_db
from alert_relay.events.bus import EventBus, set_event_bus
from alert_relay.notifications import (
    NotificationConfig,
    NotificationDispatcher,
    set_notification_dispatcher,
)


@pytest.fixture(autouse=True)
def event_bus():
    """
    PURPOSE: Fresh process-local EventBus for every test.

    Captures every published payload in `bus.captured` for assertions.

    Returns:
        EventBus: Bus without Redis, installed as the global singleton.
    """
    bus = EventBus("")
    bus.captured = []

    async def capture(payload):
        bus.captured.append(payload)

    for event_type in ("alert_created", "alert_updated", "alert_deleted"):
        bus.on(event_type, capture)

    set_event_bus(bus)
    yield bus
    set_event_bus(None)


@pytest.fixture(autouse=True)
def disabled_notifications():
    """PURPOSE: Keep outbound notifications off unless a test opts in."""
    dispatcher = NotificationDispatcher(NotificationConfig(enabled=False))
    set_notification_dispatcher(dispatcher)
    yield dispatcher
    set_notification_dispatcher(None)


@pytest.fixture(autouse=True)
def no_rate_limits():
    """PURPOSE: Disable slowapi limits so request-heavy tests are not throttled."""
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest_asyncio.fixture
async def session_factory():
    """
    PURPOSE: In-memory SQLite session factory with all tables created.

    StaticPool keeps a single connection so every session sees the same
    in-memory database. Disposed after the test.

    Returns:
        async_sessionmaker: Factory bound to the test engine.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Import models so their tables register on Base.metadata
    import alert_relay.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield factory

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(session_factory):
    """
    PURPOSE: Async session on the in-memory database.

    Returns:
        AsyncSession: SQLAlchemy async session.
    """
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """
    PURPOSE: httpx client talking to the FastAPI app in-process.

    get_db is overridden to hand out sessions on the in-memory database.
    The app lifespan is not run, so no Redis or on-disk database is touched.

    Returns:
        AsyncClient: Client with base_url http://test.
    """
    from alert_relay.main import create_app

    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def structured_payload():
    """PURPOSE: Explicitly shaped alert as sent by a JSON alert template."""
    return {
        "action": "buy",
        "symbol": "eurusd",
        "entry": "1.1565",
        "target": "1.1598",
        "stop": "1.1532",
    }


@pytest.fixture
def strategy_message():
    """PURPOSE: TradingView strategy order-fill message."""
    return (
        "26/7/2025 VIDYA Strategy (14, 20): order BUY @ 100 filled on EURUSD. "
        "New strategy position is 100"
    )
