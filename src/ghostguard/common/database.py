"""Async database manager for GhostGuard (single-DB)."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ghostguard.common.config import GhostGuardSettings, get_settings
from ghostguard.common.models import Base

# Import all model modules so Base.metadata is complete for create_all().
import ghostguard.licensing.models  # noqa: F401
import ghostguard.identity.models  # noqa: F401
import ghostguard.bans.models  # noqa: F401
import ghostguard.telemetry.models  # noqa: F401
import ghostguard.detections.models  # noqa: F401


class DatabaseManager:
    """Manages a single async database engine.

    Every session runs under ``store_timeout``; an expired session raises
    ``TimeoutError`` and is rolled back like any other store failure.
    """

    def __init__(self, settings: GhostGuardSettings | None = None):
        self._settings = settings or get_settings()
        self.engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def timeout(self) -> float:
        return self._settings.store_timeout

    async def init(self) -> None:
        url = self._settings.db_url
        self.engine = create_async_engine(url, echo=False)
        self._session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False
        )

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        if self._session_factory is None:
            raise RuntimeError("DatabaseManager not initialized — call init() first")
        async with self._session_factory() as session:
            try:
                async with asyncio.timeout(self.timeout):
                    yield session
                    await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        if self.engine is None:
            raise RuntimeError("DatabaseManager not initialized — call init() first")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self._session_factory = None
