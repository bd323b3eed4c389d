"""Shared values and helpers for the test modules."""

import time

from authgate.services.totp import code_at

PASSWORD = "CorrectHorse123"


def wrong_code(secret: str) -> str:
    """A six-digit code outside the drift window around now."""
    now = int(time.time())
    near = {code_at(secret, now + offset) for offset in range(-90, 91, 30)}
    for candidate in ("000000", "111111", "222222", "333333"):
        if candidate not in near:
            return candidate
    raise AssertionError("no code outside the window")
