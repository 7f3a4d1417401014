"""Liveness tracking from agent heartbeats."""

import time
from dataclasses import dataclass, field
from typing import Any, Callable

from ghostguard.common.exceptions import MissingFieldsError
from ghostguard.live.partitions import PartitionedStore

DEFAULT_ONLINE_WINDOW = 30.0  # seconds


@dataclass(frozen=True)
class LivenessRecord:
    last_seen_at: float  # wall-clock seconds
    player_count: int
    uptime_seconds: float
    version: str | None


@dataclass(frozen=True)
class TenantSnapshot:
    """Everything one heartbeat writes; replaced as a unit."""

    record: LivenessRecord
    roster: list[dict[str, Any]] = field(default_factory=list)


class LivenessTracker:
    """Last heartbeat per tenant; online is derived from elapsed time only."""

    def __init__(
        self,
        online_window: float = DEFAULT_ONLINE_WINDOW,
        clock: Callable[[], float] = time.time,
    ):
        self.online_window = online_window
        self._clock = clock
        self._state: PartitionedStore[TenantSnapshot | None] = PartitionedStore(lambda: None)

    def heartbeat(
        self,
        license_key: str | None,
        players: Any = None,
        version: str | None = None,
        uptime: float | None = None,
    ) -> LivenessRecord:
        """Overwrite the tenant's roster and liveness record.

        License validity is deliberately not checked here.
        """
        if not license_key:
            raise MissingFieldsError("license_key is required", code="MISSING_LICENSE")

        roster = list(players) if isinstance(players, list) else []
        record = LivenessRecord(
            last_seen_at=self._clock(),
            player_count=len(roster),
            uptime_seconds=float(uptime or 0),
            version=version or None,
        )
        with self._state.locked(license_key) as part:
            part.value = TenantSnapshot(record=record, roster=roster)
        return record

    def _snapshot(self, license_key: str) -> TenantSnapshot | None:
        part = self._state.peek(license_key)
        if part is None:
            return None
        with part.lock:
            return part.value

    def is_online(self, record: LivenessRecord) -> bool:
        return self._clock() - record.last_seen_at < self.online_window

    def status(self, license_key: str) -> dict[str, Any]:
        snapshot = self._snapshot(license_key)
        if snapshot is None:
            return {"online": False, "players": 0, "uptime": 0, "version": None}

        record = snapshot.record
        return {
            "online": self.is_online(record),
            "players": record.player_count,
            "uptime": record.uptime_seconds,
            "version": record.version,
            "last_seen": int(record.last_seen_at * 1000),
        }

    def roster(self, license_key: str) -> list[dict[str, Any]]:
        snapshot = self._snapshot(license_key)
        if snapshot is None:
            return []
        return list(snapshot.roster)
