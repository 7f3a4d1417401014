"""Per-tenant command mailbox between the dashboard and polling agents.

Delivery is at-most-once: a drain hands over the whole queue and clears it,
there is no acknowledgement and no redelivery.
"""

import secrets
import time
from dataclasses import asdict, dataclass, field
from typing import Any

from ghostguard.common.models import utcnow
from ghostguard.live.partitions import PartitionedStore

DEFAULT_CAPACITY = 200
DEFAULT_TRIM = 50


def new_command_id() -> str:
    return f"ACT-{int(time.time() * 1000)}-{secrets.randbelow(9999)}"


@dataclass(frozen=True)
class Command:
    type: str
    payload: Any = field(default_factory=dict)
    id: str = field(default_factory=new_command_id)
    created_at: str = field(default_factory=lambda: utcnow().isoformat())

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class CommandQueue:
    """Bounded FIFO per license key with batched drop-oldest trimming.

    When a push takes the queue past ``capacity`` the oldest ``trim`` entries
    are removed in one cut, so the length follows a sawtooth between
    ``capacity - trim + 1`` and ``capacity``.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, trim: int = DEFAULT_TRIM):
        if trim < 1 or trim > capacity:
            raise ValueError("trim must be between 1 and capacity")
        self.capacity = capacity
        self.trim = trim
        self._queues: PartitionedStore[list[Command]] = PartitionedStore(list)

    def push(self, license_key: str, command: Command) -> None:
        with self._queues.locked(license_key) as part:
            part.value.append(command)
            if len(part.value) > self.capacity:
                del part.value[: self.trim]

    def drain(self, license_key: str) -> list[Command]:
        """Return every queued command for the tenant and leave the queue empty."""
        part = self._queues.peek(license_key)
        if part is None:
            return []
        with part.lock:
            drained, part.value = part.value, []
        return drained

    def pending(self, license_key: str) -> int:
        part = self._queues.peek(license_key)
        if part is None:
            return 0
        with part.lock:
            return len(part.value)
