import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv(override=True)


def _env_bool(name: str, default: bool = False) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_list(name: str, default: str = "") -> tuple[str, ...]:
    raw_value = os.getenv(name, default)
    return tuple(item.strip() for item in raw_value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str = os.getenv("DATABASE_URL", "")
    jwt_secret: str = os.getenv("JWT_SECRET", "")
    jwt_algorithm: str = os.getenv("ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
    )
    token_key_expire_minutes: int = int(os.getenv("TOKEN_KEY_EXPIRE_MINUTES", "5"))
    # base64 of 32 random bytes
    totp_encryption_key: str = os.getenv("TOTP_ENCRYPTION_KEY", "")
    totp_issuer: str = os.getenv("TOTP_ISSUER", "AuthGate")
    totp_window: int = int(os.getenv("TOTP_WINDOW", "1"))
    backup_code_count: int = int(os.getenv("BACKUP_CODE_COUNT", "10"))
    backup_code_length: int = int(os.getenv("BACKUP_CODE_LENGTH", "8"))
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "10"))
    pending_enrollment_ttl_seconds: int = int(
        os.getenv("PENDING_ENROLLMENT_TTL_SECONDS", "600")
    )
    totp_purge_on_disable: bool = _env_bool("TOTP_PURGE_ON_DISABLE", True)
    totp_max_attempts: int = int(os.getenv("TOTP_MAX_ATTEMPTS", "5"))
    totp_attempt_window_seconds: int = int(
        os.getenv("TOTP_ATTEMPT_WINDOW_SECONDS", "900")
    )
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    seed_username: str = os.getenv("SEED_USERNAME", "").strip()
    seed_email: str = os.getenv("SEED_EMAIL", "").strip().lower()
    seed_password: str = os.getenv("SEED_PASSWORD", "")
    cors_origins: tuple[str, ...] = field(
        default_factory=lambda: _env_list(
            "CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
        )
    )


settings = Settings()
