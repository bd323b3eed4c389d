import logging
import threading
import time

from authgate.config import settings
from authgate.errors import TooManyAttempts

LOGGER = logging.getLogger(__name__)


class AttemptLimiter:
    """Sliding-window count of code attempts per key, cleared on success."""

    def __init__(self, max_attempts: int, window_seconds: int) -> None:
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._attempts: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def _recent(self, key: str, now: float) -> list[float]:
        recent = [
            ts for ts in self._attempts.get(key, []) if now - ts < self.window_seconds
        ]
        if recent:
            self._attempts[key] = recent
        else:
            self._attempts.pop(key, None)
        return recent

    def acquire(self, key: str) -> None:
        # counted up front, so parallel guesses cannot all slip past the limit
        if self.max_attempts <= 0:
            return
        now = time.time()
        with self._lock:
            recent = self._recent(key, now)
            if len(recent) >= self.max_attempts:
                LOGGER.warning("Attempt limit reached for %s", key)
                raise TooManyAttempts("Too many failed attempts")
            recent.append(now)
            self._attempts[key] = recent

    def reset(self, key: str) -> None:
        with self._lock:
            self._attempts.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._attempts.clear()


attempt_limiter = AttemptLimiter(
    settings.totp_max_attempts, settings.totp_attempt_window_seconds
)
