# Shared database configuration
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase as _DeclarativeBase
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import func

from common.core.config_service import config_service
from common.db.db_utils import DateTimeUTC, create_metadata

DATABASE_URL = config_service.get_database_url()


def to_async_url(url: str) -> str:
    """Map plain driver URLs onto their async drivers (asyncpg / aiosqlite)."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def create_engine_for(url: str) -> AsyncEngine:
    async_url = to_async_url(url)
    if async_url.startswith("sqlite"):
        if ":memory:" in async_url:
            # One shared connection, otherwise every session sees its own empty database
            return create_async_engine(async_url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
        return create_async_engine(async_url, connect_args={"check_same_thread": False}, pool_pre_ping=True)

    return create_async_engine(
        async_url,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_pre_ping=True,
    )


engine = create_engine_for(DATABASE_URL)

AsyncSessionLocal = async_sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


class Base(_DeclarativeBase):
    __abstract__ = True
    metadata = create_metadata()

    created_at: Mapped[datetime] = mapped_column(DateTimeUTC(), server_default=func.current_timestamp())
    updated_at: Mapped[datetime] = mapped_column(
        DateTimeUTC(),
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
    )
