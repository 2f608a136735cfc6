from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from rsvphub.core.config import settings


def engine_options(url: str) -> dict:
    """Pool settings for server databases; SQLite's async driver takes none."""
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }


engine = create_async_engine(settings.DATABASE_URL, echo=settings.DB_ECHO, **engine_options(settings.DATABASE_URL))

# Objects stay readable after commit; the upsert reads ids back post-commit
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """One session per request."""
    async with AsyncSessionLocal() as session:
        yield session
