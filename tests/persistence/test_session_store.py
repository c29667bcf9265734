"""Tests for the in-memory session store with a controlled clock."""

from __future__ import annotations

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

from fplweb.persistence.session_store import SessionStore

T0 = datetime(2026, 6, 15, 8, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class TickingClock:
    """Advances a little on every read; safe to share between threads."""

    def __init__(self, now: datetime = T0, tick: timedelta = timedelta(milliseconds=10)):
        self.now = now
        self.tick = tick
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            self.now += self.tick
            return self.now


def _store() -> tuple[SessionStore, FakeClock]:
    clock = FakeClock()
    return SessionStore(clock=clock), clock


class TestIdentifiers:
    def test_ids_are_256_bit_hex(self):
        session_id = SessionStore.generate_id()
        assert len(session_id) == 64
        int(session_id, 16)

    def test_ids_are_unique(self):
        assert len({SessionStore.generate_id() for _ in range(100)}) == 100


class TestPendingLogin:
    def test_present_before_five_minutes(self):
        store, clock = _store()
        sid = store.create_pending_login("c=1", "tok")
        clock.advance(minutes=4, seconds=59)
        pending = store.get_pending_login(sid)
        assert pending is not None
        assert pending.cookies == "c=1"
        assert pending.token == "tok"

    def test_absent_after_five_minutes(self):
        store, clock = _store()
        sid = store.create_pending_login("c=1", "tok")
        clock.advance(minutes=5, seconds=1)
        assert store.get_pending_login(sid) is None
        assert store.counts()["pending"] == 0

    def test_unknown_id(self):
        store, _ = _store()
        assert store.get_pending_login("nope") is None


class TestActiveSession:
    def test_activate_consumes_pending(self):
        store, _ = _store()
        sid = store.create_pending_login("c=1", "tok")
        assert store.activate_session(sid, "c=2", "tok2", "us-1")
        assert store.get_pending_login(sid) is None
        session = store.get_session(sid)
        assert session is not None
        assert session.cookies == "c=2"
        assert session.user_session == "us-1"

    def test_sliding_expiry(self):
        store, clock = _store()
        store.activate_session("s1", "c", "t", "u")
        for _ in range(5):
            clock.advance(minutes=20)
            assert store.get_session("s1") is not None

    def test_expires_when_untouched(self):
        store, clock = _store()
        store.activate_session("s1", "c", "t", "u")
        clock.advance(minutes=31)
        assert store.get_session("s1") is None
        assert store.counts()["active"] == 0

    def test_snapshot_does_not_alias_store(self):
        store, _ = _store()
        store.activate_session("s1", "c", "t", "u")
        snapshot = store.get_session("s1")
        snapshot.cookies = "tampered"
        assert store.get_session("s1").cookies == "c"

    def test_delete_is_idempotent(self):
        store, _ = _store()
        store.activate_session("s1", "c", "t", "u")
        store.delete_session("s1")
        store.delete_session("s1")
        assert store.get_session("s1") is None


class TestSweep:
    def test_sweep_removes_expired_entries(self):
        store, clock = _store()
        store.activate_session("old", "c", "t", "u")
        store.create_pending_login("c", "t")
        clock.advance(minutes=10)
        store.activate_session("fresh", "c", "t", "u")
        assert store.sweep() == 1
        clock.advance(minutes=25)
        assert store.sweep() == 1
        assert store.counts() == {"pending": 0, "active": 1}

    async def test_sweeper_started_once(self):
        store, _ = _store()
        first = store.start_sweeper(interval=3600)
        second = store.start_sweeper(interval=3600)
        assert first is second
        await store.stop_sweeper()
        assert first.cancelled()

    async def test_sweeper_runs_periodically(self):
        store, clock = _store()
        store.activate_session("s1", "c", "t", "u")
        clock.advance(minutes=31)
        store.start_sweeper(interval=0.01)
        await asyncio.sleep(0.05)
        await store.stop_sweeper()
        assert store.counts()["active"] == 0


class TestConcurrentAccess:
    THREADS = 8
    READS = 200

    def test_parallel_reads_only_move_expiry_forward(self):
        store = SessionStore(clock=TickingClock())
        store.activate_session("s1", "c", "t", "u")
        start = threading.Barrier(self.THREADS)

        def reader() -> list[datetime]:
            start.wait()
            seen = []
            for _ in range(self.READS):
                session = store.get_session("s1")
                assert session is not None
                seen.append(session.expires_at)
            return seen

        with ThreadPoolExecutor(max_workers=self.THREADS) as pool:
            futures = [pool.submit(reader) for _ in range(self.THREADS)]
            observed = [future.result() for future in futures]

        for seen in observed:
            assert seen == sorted(seen)
            assert len(set(seen)) == len(seen)
        every_expiry = [expiry for seen in observed for expiry in seen]
        assert len(set(every_expiry)) == self.THREADS * self.READS
        assert store.get_session("s1").expires_at > max(every_expiry)
        assert store.counts() == {"pending": 0, "active": 1}

    def test_delete_during_reads_is_final(self):
        store = SessionStore(clock=TickingClock())
        store.activate_session("s1", "c", "t", "u")
        start = threading.Barrier(self.THREADS + 1)

        def reader() -> list[bool]:
            start.wait()
            return [store.get_session("s1") is not None for _ in range(self.READS)]

        def deleter() -> None:
            start.wait()
            store.delete_session("s1")

        with ThreadPoolExecutor(max_workers=self.THREADS + 1) as pool:
            readers = [pool.submit(reader) for _ in range(self.THREADS)]
            deletion = pool.submit(deleter)
            deletion.result()
            observed = [future.result() for future in readers]

        for found in observed:
            # Once a reader misses the session it never sees it again.
            first_miss = found.index(False) if False in found else len(found)
            assert not any(found[first_miss:])
        assert store.get_session("s1") is None
        assert store.counts() == {"pending": 0, "active": 0}
