from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
import threading
from typing import Protocol

from authgate.config import settings


@dataclass(frozen=True)
class PendingEnrollment:
    secret: str
    backup_codes: tuple[str, ...]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class PendingEnrollmentStore(Protocol):
    def get(self, account_id: int) -> PendingEnrollment | None: ...

    def set(self, account_id: int, pending: PendingEnrollment) -> None: ...

    def delete(self, account_id: int) -> None: ...


class InMemoryPendingStore:
    """Entries older than ``ttl_seconds`` read as absent; ``0`` disables expiry."""

    def __init__(self, ttl_seconds: int = 600) -> None:
        self._ttl_seconds = ttl_seconds
        self._entries: dict[int, PendingEnrollment] = {}
        self._lock = threading.Lock()

    def get(self, account_id: int) -> PendingEnrollment | None:
        with self._lock:
            pending = self._entries.get(account_id)
            if pending is None:
                return None
            if self._is_expired(pending):
                del self._entries[account_id]
                return None
            return pending

    def set(self, account_id: int, pending: PendingEnrollment) -> None:
        with self._lock:
            self._sweep()
            self._entries[account_id] = pending

    def delete(self, account_id: int) -> None:
        with self._lock:
            self._entries.pop(account_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _sweep(self) -> None:
        expired = [
            account_id
            for account_id, pending in self._entries.items()
            if self._is_expired(pending)
        ]
        for account_id in expired:
            del self._entries[account_id]

    def _is_expired(self, pending: PendingEnrollment) -> bool:
        if self._ttl_seconds <= 0:
            return False
        expires_at = pending.created_at + timedelta(seconds=self._ttl_seconds)
        return datetime.now(timezone.utc) >= expires_at


pending_store = InMemoryPendingStore(settings.pending_enrollment_ttl_seconds)
