import secrets

import pyotp

SECRET_LENGTH = 32  # base32 characters, 160 bits
# no I, O, 0 or 1 so codes survive being read aloud or written down
BACKUP_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def generate_secret() -> str:
    return pyotp.random_base32(length=SECRET_LENGTH)


def generate_backup_codes(count: int = 10, length: int = 8) -> list[str]:
    if count <= 0:
        raise ValueError("Backup code count must be positive")
    if length <= 0:
        raise ValueError("Backup code length must be positive")
    return [
        "".join(secrets.choice(BACKUP_CODE_ALPHABET) for _ in range(length))
        for _ in range(count)
    ]


def normalize_backup_code(code: str) -> str:
    return code.replace("-", "").replace(" ", "").strip().upper()
