"""Tests for the pending enrollment store, attempt limiter and account locks."""

from datetime import datetime, timedelta, timezone
import threading
import time

import pytest

from authgate.errors import TooManyAttempts
from authgate.services.locks import AccountLocks
from authgate.services.pending import InMemoryPendingStore, PendingEnrollment
from authgate.services.throttle import AttemptLimiter


def _pending(secret="JBSWY3DPEHPK3PXP", age_seconds=0):
    created_at = datetime.now(timezone.utc) - timedelta(seconds=age_seconds)
    return PendingEnrollment(
        secret=secret, backup_codes=("ABCD2345",), created_at=created_at
    )


class TestPendingStore:
    def test_set_get_delete(self):
        store = InMemoryPendingStore()
        assert store.get(1) is None
        store.set(1, _pending())
        assert store.get(1).secret == "JBSWY3DPEHPK3PXP"
        store.delete(1)
        assert store.get(1) is None

    def test_last_write_wins(self):
        store = InMemoryPendingStore()
        store.set(1, _pending("FIRST"))
        store.set(1, _pending("SECOND"))
        assert store.get(1).secret == "SECOND"

    def test_accounts_are_independent(self):
        store = InMemoryPendingStore()
        store.set(1, _pending("ONE"))
        store.set(2, _pending("TWO"))
        store.delete(1)
        assert store.get(2).secret == "TWO"

    def test_expired_entries_read_as_absent(self):
        store = InMemoryPendingStore(ttl_seconds=600)
        store.set(1, _pending(age_seconds=601))
        assert store.get(1) is None

    def test_zero_ttl_never_expires(self):
        store = InMemoryPendingStore(ttl_seconds=0)
        store.set(1, _pending(age_seconds=86_400))
        assert store.get(1) is not None

    def test_delete_missing_is_noop(self):
        InMemoryPendingStore().delete(42)

    def test_set_sweeps_expired_entries(self):
        store = InMemoryPendingStore(ttl_seconds=600)
        store.set(1, _pending(age_seconds=601))
        store.set(2, _pending(age_seconds=601))
        store.set(3, _pending())
        assert len(store) == 1
        assert store.get(3) is not None


class TestAttemptLimiter:
    def test_blocks_after_max_attempts(self):
        limiter = AttemptLimiter(max_attempts=3, window_seconds=60)
        for _ in range(3):
            limiter.acquire("login:1")
        with pytest.raises(TooManyAttempts):
            limiter.acquire("login:1")

    def test_keys_are_independent(self):
        limiter = AttemptLimiter(max_attempts=1, window_seconds=60)
        limiter.acquire("login:1")
        limiter.acquire("login:2")

    def test_reset_clears_attempts(self):
        limiter = AttemptLimiter(max_attempts=1, window_seconds=60)
        limiter.acquire("login:1")
        limiter.reset("login:1")
        limiter.acquire("login:1")

    def test_attempts_slide_out_of_window(self, monkeypatch):
        limiter = AttemptLimiter(max_attempts=1, window_seconds=60)
        limiter.acquire("login:1")
        later = time.time() + 61
        monkeypatch.setattr("authgate.services.throttle.time.time", lambda: later)
        limiter.acquire("login:1")

    def test_zero_max_disables_limit(self):
        limiter = AttemptLimiter(max_attempts=0, window_seconds=60)
        for _ in range(10):
            limiter.acquire("login:1")

    def test_parallel_attempts_respect_limit(self):
        limiter = AttemptLimiter(max_attempts=5, window_seconds=60)
        barrier = threading.Barrier(20)
        admitted = []
        refused = []

        def attempt():
            barrier.wait()
            try:
                limiter.acquire("login:1")
                admitted.append(1)
            except TooManyAttempts:
                refused.append(1)

        threads = [threading.Thread(target=attempt) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert len(admitted) == 5
        assert len(refused) == 15


class TestAccountLocks:
    def test_serialize_same_account(self):
        locks = AccountLocks()
        inside = []
        overlap = []

        def worker():
            with locks.hold(1):
                inside.append(1)
                if len(inside) > 1:
                    overlap.append(True)
                time.sleep(0.01)
                inside.pop()

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert overlap == []

    def test_idle_locks_are_dropped(self):
        locks = AccountLocks()
        for account_id in range(100):
            with locks.hold(account_id):
                assert len(locks) == 1
        assert len(locks) == 0

    def test_lock_released_after_error(self):
        locks = AccountLocks()
        with pytest.raises(RuntimeError):
            with locks.hold(1):
                raise RuntimeError("boom")
        assert len(locks) == 0
        with locks.hold(1):
            pass
