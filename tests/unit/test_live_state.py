"""Tests for the in-memory live state: partitions, command queue, log buffer."""

import threading

import pytest

from ghostguard.live.commands import Command, CommandQueue, new_command_id
from ghostguard.live.logbuffer import LogEvent, LogRingBuffer, new_log_id
from ghostguard.live.partitions import PartitionedStore


class TestPartitionedStore:
    def test_partition_created_lazily(self):
        store = PartitionedStore(list)

        assert store.peek("GG-1") is None
        part = store.partition("GG-1")
        assert part.value == []
        assert store.peek("GG-1") is part

    def test_same_partition_returned(self):
        store = PartitionedStore(list)
        assert store.partition("GG-1") is store.partition("GG-1")

    def test_tenants_are_isolated(self):
        store = PartitionedStore(list)
        with store.locked("A") as part:
            part.value.append(1)
        assert store.partition("B").value == []
        assert store.partition("A").lock is not store.partition("B").lock

    def test_concurrent_creation_yields_one_partition(self):
        store = PartitionedStore(list)
        seen = []

        def grab():
            seen.append(store.partition("GG-1"))

        threads = [threading.Thread(target=grab) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert all(p is seen[0] for p in seen)



class TestCommandQueue:
    def test_command_defaults(self):
        cmd = Command(type="kick")
        assert cmd.id.startswith("ACT-")
        assert cmd.payload == {}
        assert cmd.created_at
        assert set(cmd.to_dict()) == {"id", "type", "payload", "created_at"}

    def test_command_ids_shape(self):
        parts = new_command_id().split("-")
        assert parts[0] == "ACT"
        assert len(parts) == 3

    def test_push_then_drain_in_order(self):
        q = CommandQueue()
        for i in range(3):
            q.push("GG-1", Command(type="dm", payload={"n": i}))
        drained = q.drain("GG-1")
        assert [c.payload["n"] for c in drained] == [0, 1, 2]

    def test_drain_empties_queue(self):
        q = CommandQueue()
        q.push("GG-1", Command(type="kick"))
        q.drain("GG-1")
        assert q.drain("GG-1") == []
        assert q.pending("GG-1") == 0

    def test_drain_unknown_tenant(self):
        assert CommandQueue().drain("nobody") == []

    def test_push_after_drain_only_visible_next_drain(self):
        q = CommandQueue()
        q.push("GG-1", Command(type="kick", payload={"n": 1}))
        first = q.drain("GG-1")
        q.push("GG-1", Command(type="kick", payload={"n": 2}))
        second = q.drain("GG-1")
        assert [c.payload["n"] for c in first] == [1]
        assert [c.payload["n"] for c in second] == [2]

    def test_batched_trim_210_pushes_leave_160(self):
        q = CommandQueue()
        for i in range(210):
            q.push("GG-1", Command(type="dm", payload={"n": i}))
        drained = q.drain("GG-1")
        assert len(drained) == 160
        # the 201st push cut the oldest 50 in one go
        assert [c.payload["n"] for c in drained] == list(range(50, 210))

    def test_sawtooth_length(self):
        q = CommandQueue()
        for _ in range(200):
            q.push("GG-1", Command(type="dm"))
        assert q.pending("GG-1") == 200
        q.push("GG-1", Command(type="dm"))
        assert q.pending("GG-1") == 151

    def test_custom_capacity(self):
        q = CommandQueue(capacity=4, trim=2)
        for i in range(5):
            q.push("GG-1", Command(type="dm", payload={"n": i}))
        assert [c.payload["n"] for c in q.drain("GG-1")] == [2, 3, 4]

    def test_invalid_trim(self):
        with pytest.raises(ValueError):
            CommandQueue(capacity=10, trim=0)
        with pytest.raises(ValueError):
            CommandQueue(capacity=10, trim=11)

    def test_tenants_do_not_share_queues(self):
        q = CommandQueue()
        q.push("A", Command(type="kick"))
        assert q.drain("B") == []
        assert len(q.drain("A")) == 1

    def test_concurrent_push_and_drain_lose_nothing(self):
        q = CommandQueue(capacity=100_000, trim=1)
        collected = []
        done = threading.Event()

        def producer(offset):
            for i in range(500):
                q.push("GG-1", Command(type="dm", payload={"n": offset + i}))

        def consumer():
            while not done.is_set():
                collected.extend(q.drain("GG-1"))

        producers = [threading.Thread(target=producer, args=(k * 1000,)) for k in range(4)]
        drainer = threading.Thread(target=consumer)
        drainer.start()
        for t in producers:
            t.start()
        for t in producers:
            t.join()
        done.set()
        drainer.join()
        collected.extend(q.drain("GG-1"))

        seen = [c.payload["n"] for c in collected]
        assert len(seen) == 2000
        assert len(set(seen)) == 2000


class TestLogEvent:
    def test_defaults(self):
        event = LogEvent.create("hello")
        assert event.level == "info"
        assert event.type == "log"
        assert event.title == "Server"
        assert event.meta is None
        assert event.id.startswith("LOG-")

    def test_blank_fields_take_defaults(self):
        event = LogEvent.create("hello", level="", type=None, title="")
        assert (event.level, event.type, event.title) == ("info", "log", "Server")

    def test_to_dict_shape(self):
        data = LogEvent.create("x", level="warn", meta={"a": 1}).to_dict()
        assert list(data) == ["id", "time", "level", "type", "title", "message", "meta"]
        assert data["meta"] == {"a": 1}

    def test_falsy_meta_kept(self):
        assert LogEvent.create("x", meta={}).meta == {}
        assert LogEvent.create("x", meta=0).meta == 0
        assert LogEvent.create("x", meta=[]).to_dict()["meta"] == []

    def test_log_id_shape(self):
        assert new_log_id().startswith("LOG-")


class TestLogRingBuffer:
    def test_newest_first(self):
        buf = LogRingBuffer()
        for i in range(3):
            buf.push("GG-1", LogEvent.create(f"m{i}"))
        assert [e.message for e in buf.read("GG-1")] == ["m2", "m1", "m0"]

    def test_310_ingests_leave_300(self):
        buf = LogRingBuffer()
        for i in range(310):
            buf.push("GG-1", LogEvent.create(f"m{i}"))
        events = buf.read("GG-1")
        assert len(events) == 300
        assert events[0].message == "m309"
        assert events[-1].message == "m10"
        assert "m9" not in {e.message for e in events}

    def test_read_limit(self):
        buf = LogRingBuffer()
        for i in range(10):
            buf.push("GG-1", LogEvent.create(f"m{i}"))
        assert [e.message for e in buf.read("GG-1", 2)] == ["m9", "m8"]
        assert buf.read("GG-1", 0) == []

    def test_unknown_tenant(self):
        assert LogRingBuffer().read("nobody") == []

    def test_custom_capacity(self):
        buf = LogRingBuffer(capacity=2)
        for i in range(5):
            buf.push("GG-1", LogEvent.create(f"m{i}"))
        assert [e.message for e in buf.read("GG-1")] == ["m4", "m3"]
