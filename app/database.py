# app/database.py

# type: ignore[misc]
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine
from sqlalchemy.orm import declarative_base
from contextlib import asynccontextmanager
from app.core.config import get_settings
import os


def normalize_database_url(url: str) -> str:
    # Convert postgresql:// to postgresql+asyncpg:// for async support
    if url.startswith('postgresql://'):
        return url.replace('postgresql://', 'postgresql+asyncpg://', 1)
    return url


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """Create an async engine; SQLite gets real SAVEPOINT support."""
    url = normalize_database_url(url)

    if url.startswith('sqlite'):
        engine = create_async_engine(url, future=True, **kwargs)

        # pysqlite/aiosqlite defer BEGIN, which breaks SAVEPOINT; take over transaction control
        @event.listens_for(engine.sync_engine, "connect")
        def _do_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def _do_begin(conn):
            conn.exec_driver_sql("BEGIN")

        return engine

    return create_async_engine(
        url,
        echo=False,
        future=True,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=1800,
        **kwargs
    )


settings = get_settings()

# Use environment variable directly if settings is empty
database_url = settings.DATABASE_URL or os.environ.get('DATABASE_URL', '')
if not database_url:
    raise ValueError("DATABASE_URL is not set in environment variables")

engine = build_engine(database_url)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

Base = declarative_base()


@asynccontextmanager
async def get_session() -> AsyncSession:
    session = async_session()
    try:
        yield session
    finally:
        await session.close()
