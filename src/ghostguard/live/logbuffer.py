"""Newest-first ring buffer of recent agent log events."""

import secrets
import time
from collections import deque
from dataclasses import asdict, dataclass, field
from itertools import islice
from typing import Any

from ghostguard.common.models import utcnow
from ghostguard.live.partitions import PartitionedStore

DEFAULT_CAPACITY = 300

DEFAULT_LEVEL = "info"
DEFAULT_TYPE = "log"
DEFAULT_TITLE = "Server"


def new_log_id() -> str:
    return f"LOG-{int(time.time() * 1000)}-{secrets.randbelow(9999)}"


@dataclass(frozen=True)
class LogEvent:
    message: str
    level: str = DEFAULT_LEVEL
    type: str = DEFAULT_TYPE
    title: str = DEFAULT_TITLE
    meta: Any = None
    id: str = field(default_factory=new_log_id)
    time: str = field(default_factory=lambda: utcnow().isoformat())

    @classmethod
    def create(
        cls,
        message: str,
        level: str | None = None,
        type: str | None = None,
        title: str | None = None,
        meta: Any = None,
    ) -> "LogEvent":
        return cls(
            message=message,
            level=level or DEFAULT_LEVEL,
            type=type or DEFAULT_TYPE,
            title=title or DEFAULT_TITLE,
            meta=meta,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        return {k: data[k] for k in ("id", "time", "level", "type", "title", "message", "meta")}


class LogRingBuffer:
    """Per-tenant bounded buffer; new events go to the head, the tail falls off."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        self.capacity = capacity
        self._buffers: PartitionedStore[deque[LogEvent]] = PartitionedStore(
            lambda: deque(maxlen=capacity)
        )

    def push(self, license_key: str, event: LogEvent) -> None:
        with self._buffers.locked(license_key) as part:
            part.value.appendleft(event)

    def read(self, license_key: str, limit: int | None = None) -> list[LogEvent]:
        """Newest-first snapshot of up to ``limit`` events."""
        part = self._buffers.peek(license_key)
        if part is None:
            return []
        with part.lock:
            if limit is None:
                return list(part.value)
            return list(islice(part.value, max(limit, 0)))
