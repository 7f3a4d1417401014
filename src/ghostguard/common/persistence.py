"""Best-effort store writes.

Required writes go through ``DatabaseManager.get_session()`` in the request
handler and surface failures as ``DB_ERROR``. Mirrors of in-memory state use
``BestEffortWriter`` instead: each write gets its own session, is bounded by
the store timeout, is never retried, and a failure is logged and dropped.
"""

from typing import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from ghostguard.common.database import DatabaseManager
from ghostguard.common.logging import get_logger

logger = get_logger("persistence")

SessionWork = Callable[[AsyncSession], Awaitable[object]]


class BestEffortWriter:
    """Fire-and-forget store writes with a logged-failure contract."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    async def write(self, description: str, work: SessionWork, license_key: str | None = None) -> bool:
        """Run ``work`` in a fresh session. Returns False if it failed."""
        try:
            async with self.db.get_session() as session:
                await work(session)
        except Exception as exc:
            logger.warning(
                "best-effort write dropped: %s (%s: %s)",
                description, type(exc).__name__, exc,
                extra={"license_key": license_key},
            )
            return False
        return True
