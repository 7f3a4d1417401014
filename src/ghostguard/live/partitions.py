"""Per-tenant partitioned in-memory state.

Each license key owns one partition with its own lock, so operations on one
tenant never wait on another. A short guard lock only serializes partition
creation. Critical sections never await, so the same locks are safe from the
event loop and from threadpool handlers alike.
"""

import threading
from contextlib import contextmanager
from typing import Callable, Generic, Iterator, TypeVar

T = TypeVar("T")


class Partition(Generic[T]):
    """A single tenant's slot: a value and the lock guarding it."""

    __slots__ = ("lock", "value")

    def __init__(self, value: T):
        self.lock = threading.Lock()
        self.value = value


class PartitionedStore(Generic[T]):
    """Map of license key -> Partition, created lazily from ``factory``.

    Partitions are never evicted. Agent endpoints accept any license key
    without authentication, so the number of partitions grows with the
    distinct keys callers send until the process restarts. Each partition's
    contents are bounded by the structure the factory builds.
    """

    def __init__(self, factory: Callable[[], T]):
        self._factory = factory
        self._partitions: dict[str, Partition[T]] = {}
        self._guard = threading.Lock()

    def partition(self, key: str) -> Partition[T]:
        part = self._partitions.get(key)
        if part is None:
            with self._guard:
                part = self._partitions.get(key)
                if part is None:
                    part = Partition(self._factory())
                    self._partitions[key] = part
        return part

    def peek(self, key: str) -> Partition[T] | None:
        """Return the partition without creating it."""
        return self._partitions.get(key)

    @contextmanager
    def locked(self, key: str) -> Iterator[Partition[T]]:
        part = self.partition(key)
        with part.lock:
            yield part
