from datetime import datetime
from urllib.parse import quote

import pyotp

DEFAULT_DIGITS = 6
DEFAULT_INTERVAL = 30


def verify_code(
    code: str,
    secret: str,
    window: int = 1,
    for_time: datetime | int | None = None,
) -> bool:
    """True if ``code`` matches any step within ``window`` of ``for_time`` (default now)."""
    if not code or not secret:
        return False
    cleaned = code.replace(" ", "").strip()
    if len(cleaned) != DEFAULT_DIGITS or not cleaned.isdigit():
        return False
    try:
        totp = pyotp.TOTP(secret, digits=DEFAULT_DIGITS, interval=DEFAULT_INTERVAL)
        return totp.verify(cleaned, for_time=for_time, valid_window=window)
    except (TypeError, ValueError):
        # binascii.Error from a bad base32 secret is a ValueError
        return False


def code_at(secret: str, for_time: datetime | int) -> str:
    return pyotp.TOTP(secret, digits=DEFAULT_DIGITS, interval=DEFAULT_INTERVAL).at(
        for_time
    )


def provisioning_uri(secret: str, account_label: str, issuer: str) -> str:
    issuer_part = quote(issuer, safe="")
    label_part = quote(account_label, safe="")
    return (
        f"otpauth://totp/{issuer_part}:{label_part}"
        f"?secret={secret}&issuer={issuer_part}"
    )
