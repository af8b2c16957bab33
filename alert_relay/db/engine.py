from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from alert_relay.config.settings import settings
from alert_relay.db.base import Base


# Create async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)


async def init_models(target: AsyncEngine = engine) -> None:
    """
    Create all tables that do not exist yet.

    Called once from application startup; importing alert_relay.models
    registers every table on Base.metadata.
    """
    import alert_relay.models  # noqa: F401

    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db():
    """
    Async generator that yields database sessions for FastAPI Depends.

    Usage in routes:
        async def list_alerts(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
