"""Telemetry service: heartbeats, the command mailbox and agent logs."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ghostguard.common.config import GhostGuardSettings
from ghostguard.common.database import DatabaseManager
from ghostguard.common.exceptions import MissingFieldsError
from ghostguard.common.logging import get_logger
from ghostguard.common.models import isoformat, utcnow
from ghostguard.common.persistence import BestEffortWriter
from ghostguard.identity.resolver import IdentityResolver
from ghostguard.live.commands import Command, CommandQueue
from ghostguard.live.liveness import LivenessTracker
from ghostguard.live.logbuffer import (
    DEFAULT_LEVEL,
    DEFAULT_TITLE,
    DEFAULT_TYPE,
    LogEvent,
    LogRingBuffer,
)
from ghostguard.telemetry.models import ServerLogModel, ServerStatusModel

logger = get_logger("telemetry")


def log_event_from_row(row: ServerLogModel) -> dict[str, Any]:
    """Map a stored log row to the same shape as a buffered LogEvent."""
    created = isoformat(row.created_at)
    return {
        "id": row.id or f"DB-{created}",
        "time": created,
        "level": row.level or DEFAULT_LEVEL,
        "type": row.type_ or DEFAULT_TYPE,
        "title": row.title or DEFAULT_TITLE,
        "message": row.message,
        "meta": row.meta,
    }


class TelemetryService:
    """Agent-facing live state plus its best-effort store mirrors."""

    def __init__(
        self,
        settings: GhostGuardSettings,
        db: DatabaseManager,
        tracker: LivenessTracker,
        commands: CommandQueue,
        log_buffer: LogRingBuffer,
        writer: BestEffortWriter,
        resolver: IdentityResolver | None = None,
    ):
        self.settings = settings
        self.db = db
        self.tracker = tracker
        self.commands = commands
        self.log_buffer = log_buffer
        self.writer = writer
        self.resolver = resolver or IdentityResolver()

    # ── Liveness ──

    async def heartbeat(
        self,
        license_key: str | None,
        players: Any = None,
        version: Any = None,
        uptime: Any = None,
    ) -> None:
        try:
            uptime_value = float(uptime or 0)
        except (TypeError, ValueError):
            uptime_value = 0.0
        if version is not None:
            version = str(version)
        record = self.tracker.heartbeat(license_key, players, version, uptime_value)

        async def _mirror(session: AsyncSession) -> None:
            await session.merge(ServerStatusModel(
                license_key=license_key,
                online=True,
                players=record.player_count,
                version=record.version,
                uptime=record.uptime_seconds,
                last_seen=utcnow(),
            ))

        await self.writer.write("server_status mirror", _mirror, license_key=license_key)

    def status(self, license_key: str) -> dict[str, Any]:
        return self.tracker.status(license_key)

    def roster(self, license_key: str) -> list[dict[str, Any]]:
        return self.tracker.roster(license_key)

    # ── Commands ──

    async def push_action(
        self,
        session: AsyncSession,
        token: str | None,
        type: str | None,
        payload: Any = None,
    ) -> Command:
        """Queue a dashboard command for the requester's own tenant."""
        if not token or not type:
            raise MissingFieldsError()
        identity = await self.resolver.require(session, token)

        command = Command(type=type, payload={} if payload is None else payload)
        self.commands.push(identity.license_key, command)
        logger.info(
            "queued %s command %s via %s", type, command.id, identity.kind,
            extra={"license_key": identity.license_key},
        )
        return command

    def poll_actions(self, license_key: str) -> list[Command]:
        return self.commands.drain(license_key)

    # ── Logs ──

    async def ingest_log(
        self,
        license_key: str | None,
        message: Any,
        level: str | None = None,
        type: str | None = None,
        title: str | None = None,
        meta: Any = None,
    ) -> LogEvent:
        if not license_key or not message:
            raise MissingFieldsError(
                "license_key and message are required", code="MISSING_LICENSE_OR_MESSAGE",
            )

        event = LogEvent.create(str(message), level=level, type=type, title=title, meta=meta)
        self.log_buffer.push(license_key, event)

        async def _persist(session: AsyncSession) -> None:
            session.add(ServerLogModel(
                id=event.id,
                license_key=license_key,
                level=event.level,
                type_=event.type,
                title=event.title,
                message=event.message,
                meta=event.meta,
            ))

        await self.writer.write("server_logs insert", _persist, license_key=license_key)
        return event

    def clamp_limit(self, limit: int | None) -> int:
        if limit is None or limit < 1:
            return self.settings.log_read_default
        return min(limit, self.settings.log_read_max)

    async def read_logs(self, license_key: str, limit: int | None = None) -> list[dict[str, Any]]:
        """Newest-first logs: the store when it answers, else the in-memory buffer."""
        limit = self.clamp_limit(limit)
        try:
            async with self.db.get_session() as session:
                result = await session.execute(
                    select(ServerLogModel)
                    .where(ServerLogModel.license_key == license_key)
                    .order_by(ServerLogModel.created_at.desc())
                    .limit(limit)
                )
                return [log_event_from_row(row) for row in result.scalars().all()]
        except Exception as exc:
            logger.warning(
                "log store unavailable, serving buffer (%s: %s)", type(exc).__name__, exc,
                extra={"license_key": license_key},
            )
        return [event.to_dict() for event in self.log_buffer.read(license_key, limit)]
