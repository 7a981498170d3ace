"""Async database engine and session management.

One session per request: everything a handler writes is committed together
when the handler returns, or rolled back together if it raises.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from courtdesk.core.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {}
    return {"pool_size": 20, "max_overflow": 10, "pool_pre_ping": True}


engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    **_engine_options(settings.database_url),
)

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session. Used as a FastAPI dependency."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create any missing tables. There are no migrations yet."""
    from courtdesk.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
