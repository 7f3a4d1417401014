"""Detection settings, i.e. which anti-cheat checks an agent should run."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ghostguard.common.database import DatabaseManager
from ghostguard.common.exceptions import InvalidDetectionKeyError, MissingFieldsError
from ghostguard.common.logging import get_logger
from ghostguard.common.models import utcnow
from ghostguard.common.persistence import BestEffortWriter
from ghostguard.detections.models import DETECTION_KEYS, DetectionSettingsModel
from ghostguard.identity.resolver import IdentityResolver

logger = get_logger("detections")


class DetectionService:
    def __init__(
        self,
        db: DatabaseManager,
        writer: BestEffortWriter,
        resolver: IdentityResolver | None = None,
    ):
        self.db = db
        self.writer = writer
        self.resolver = resolver or IdentityResolver()

    async def ensure_row(self, license_key: str) -> bool:
        """Create the all-enabled default row if missing. Best-effort."""

        async def _ensure(session: AsyncSession) -> None:
            if await session.get(DetectionSettingsModel, license_key) is None:
                session.add(DetectionSettingsModel(license_key=license_key))

        return await self.writer.write("detection_settings ensure", _ensure, license_key=license_key)

    async def get(self, license_key: str) -> dict[str, Any]:
        """Current toggles; all enabled when no row could be stored yet."""
        await self.ensure_row(license_key)
        async with self.db.get_session() as session:
            row = await session.get(DetectionSettingsModel, license_key)
        if row is None:
            row = DetectionSettingsModel(license_key=license_key, updated_at=utcnow())
            for attr in DETECTION_KEYS.values():
                setattr(row, attr, True)
        return row.to_dict()

    async def update(
        self,
        session: AsyncSession,
        token: str | None,
        license_key: str | None,
        key: str | None,
        value: Any,
    ) -> dict[str, Any]:
        if not token or not license_key or not key:
            raise MissingFieldsError()
        identity = await self.resolver.require_tenant(session, token, license_key)

        attr = DETECTION_KEYS.get(key)
        if attr is None:
            raise InvalidDetectionKeyError(f"Unknown detection key {key!r}")

        row = await session.get(DetectionSettingsModel, license_key)
        if row is None:
            row = DetectionSettingsModel(license_key=license_key)
            for default_attr in DETECTION_KEYS.values():
                setattr(row, default_attr, True)
            session.add(row)

        setattr(row, attr, bool(value))
        row.updated_at = utcnow()
        await session.flush()
        logger.info(
            "detection %s set to %s by %s", key, bool(value), identity.kind,
            extra={"license_key": license_key},
        )
        return row.to_dict()
