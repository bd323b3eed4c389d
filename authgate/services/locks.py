from contextlib import contextmanager
import threading


class AccountLocks:
    """One in-process lock per account id, dropped once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        # account id -> [lock, holders plus waiters]
        self._locks: dict[int, list] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, account_id: int):
        with self._guard:
            slot = self._locks.setdefault(account_id, [threading.Lock(), 0])
            slot[1] += 1
        try:
            with slot[0]:
                yield
        finally:
            with self._guard:
                slot[1] -= 1
                if slot[1] == 0:
                    del self._locks[account_id]
