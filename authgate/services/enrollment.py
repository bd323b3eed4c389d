from dataclasses import dataclass
from datetime import datetime, timezone
import logging

from authgate.config import Settings, settings
from authgate.errors import AccountNotFound, InvalidCode, NoPendingEnrollment, NotEnrolled
from authgate.services.generator import generate_backup_codes, generate_secret
from authgate.services.pending import (
    PendingEnrollment,
    PendingEnrollmentStore,
    pending_store,
)
from authgate.services.throttle import AttemptLimiter, attempt_limiter
from authgate.services.totp import provisioning_uri, verify_code
from authgate.services.totp_store import TotpStore, totp_store
from authgate.services.users import UserStore, user_store
from authgate.services.vault import SecretVault, vault

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrollmentSetup:
    secret: str
    otpauth_url: str
    backup_codes: list[str]


@dataclass(frozen=True)
class EnrollmentStatus:
    enabled: bool
    enabled_at: datetime | None = None


class EnrollmentService:
    """Password re-checks for ``disable`` and backup-code regeneration are the caller's job."""

    def __init__(
        self,
        users: UserStore,
        store: TotpStore,
        pending: PendingEnrollmentStore,
        secret_vault: SecretVault,
        limiter: AttemptLimiter,
        config: Settings = settings,
    ) -> None:
        self._users = users
        self._store = store
        self._pending = pending
        self._vault = secret_vault
        self._limiter = limiter
        self._config = config

    def begin(self, account_id: int) -> EnrollmentSetup:
        account = self._users.get_account(account_id)
        if account is None:
            raise AccountNotFound("Account not found")
        secret = generate_secret()
        backup_codes = generate_backup_codes(
            self._config.backup_code_count, self._config.backup_code_length
        )
        self._pending.set(
            account_id,
            PendingEnrollment(secret=secret, backup_codes=tuple(backup_codes)),
        )
        LOGGER.info("TOTP enrollment started for account %s", account_id)
        return EnrollmentSetup(
            secret=secret,
            otpauth_url=provisioning_uri(
                secret, account.label, self._config.totp_issuer
            ),
            backup_codes=backup_codes,
        )

    def confirm(self, account_id: int, code: str) -> bool:
        pending = self._require_pending(account_id)
        return self._check_code(account_id, code, pending.secret)

    def enable(self, account_id: int, code: str) -> EnrollmentStatus:
        pending = self._require_pending(account_id)
        # a prior confirm proves nothing here; enable may be called on its own
        if not self._check_code(account_id, code, pending.secret):
            raise InvalidCode("Invalid code")

        enabled_at = datetime.now(timezone.utc)
        self._store.save_enabled(
            account_id,
            self._vault.encrypt(pending.secret),
            self._vault.hash_backup_codes(list(pending.backup_codes)),
            enabled_at,
        )
        self._pending.delete(account_id)
        LOGGER.info("TOTP enabled for account %s", account_id)
        return EnrollmentStatus(enabled=True, enabled_at=enabled_at)

    def status(self, account_id: int) -> EnrollmentStatus:
        record = self._store.get(account_id)
        if record is None or not record.enabled:
            return EnrollmentStatus(enabled=False, enabled_at=None)
        return EnrollmentStatus(enabled=True, enabled_at=record.enabled_at)

    def disable(self, account_id: int) -> EnrollmentStatus:
        existed = self._store.disable(
            account_id, purge=self._config.totp_purge_on_disable
        )
        self._pending.delete(account_id)
        if existed:
            LOGGER.info("TOTP disabled for account %s", account_id)
        return EnrollmentStatus(enabled=False, enabled_at=None)

    def regenerate_backup_codes(self, account_id: int) -> list[str]:
        if not self._store.is_enabled(account_id):
            raise NotEnrolled("Two-factor authentication is not enabled")
        backup_codes = generate_backup_codes(
            self._config.backup_code_count, self._config.backup_code_length
        )
        replaced = self._store.replace_backup_codes(
            account_id, self._vault.hash_backup_codes(backup_codes)
        )
        if not replaced:
            # disabled between the check and the write
            raise NotEnrolled("Two-factor authentication is not enabled")
        LOGGER.info(
            "Regenerated %s backup codes for account %s", len(backup_codes), account_id
        )
        return backup_codes

    def _require_pending(self, account_id: int) -> PendingEnrollment:
        pending = self._pending.get(account_id)
        if pending is None:
            raise NoPendingEnrollment("No TOTP setup in progress")
        return pending

    def _check_code(self, account_id: int, code: str, secret: str) -> bool:
        key = f"enroll:{account_id}"
        self._limiter.acquire(key)
        if verify_code(code, secret, window=self._config.totp_window):
            self._limiter.reset(key)
            return True
        return False


enrollment_service = EnrollmentService(
    user_store, totp_store, pending_store, vault, attempt_limiter
)
