"""Database engine and session management.

Provides the async SQLAlchemy engine, the session factory used by request
handlers and the separate factory used by the audit log store (audit rows
are written in their own transaction so a checkout rollback never removes
them and an audit failure never rolls back a checkout).
"""

from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import Settings, get_settings

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def init_engine(settings: Optional[Settings] = None) -> AsyncEngine:
    """Initialise the engine lazily with connection pooling.

    Pool settings only apply to server databases (not SQLite).

    Args:
        settings: Settings to read DATABASE_URL from (defaults to cached settings)

    Returns:
        AsyncEngine: The process-wide engine
    """
    global _engine, _session_factory

    if _engine is not None:
        return _engine

    cfg = settings or get_settings()
    engine_kwargs = {
        "pool_pre_ping": True,
        "echo": cfg.DB_ECHO,
    }
    if not cfg.DATABASE_URL.startswith("sqlite"):
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10

    _engine = create_async_engine(cfg.DATABASE_URL, **engine_kwargs)
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False, autoflush=False)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory, initialising the engine on first use."""
    if _session_factory is None:
        init_engine()
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI endpoints.

    Usage:
        @router.get("/products")
        async def list_products(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with get_session_factory()() as session:
        yield session


async def dispose_engine() -> None:
    """Close pooled connections (application shutdown)."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
