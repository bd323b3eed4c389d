from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
import logging

from sqlalchemy import delete, select

from authgate.database import session_scope
from authgate.models.totp import TotpEnrollmentEntry
from authgate.services.locks import AccountLocks

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TotpEnrollment:
    account_id: int
    secret_encrypted: str
    backup_codes_hashed: tuple[str, ...]
    enabled: bool
    enabled_at: datetime | None


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; stored values are always UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TotpStore:
    """Durable ``TotpEnrollment`` records, one per account."""

    def __init__(self, locks: AccountLocks | None = None) -> None:
        self._locks = locks or AccountLocks()

    def get(self, account_id: int) -> TotpEnrollment | None:
        with session_scope() as session:
            entry = self._select(session, account_id)
            if entry is None:
                return None
            return self._to_record(entry)

    def is_enabled(self, account_id: int) -> bool:
        record = self.get(account_id)
        return record is not None and record.enabled

    def save_enabled(
        self,
        account_id: int,
        secret_encrypted: str,
        backup_codes_hashed: list[str],
        enabled_at: datetime,
    ) -> TotpEnrollment:
        """Create or overwrite the account's record in the enabled state."""
        now = datetime.now(timezone.utc)
        with self._locks.hold(account_id), session_scope() as session:
            entry = self._select(session, account_id, for_update=True)
            if entry is None:
                entry = TotpEnrollmentEntry(user_id=account_id, created_at=now)
                session.add(entry)
            entry.secret_encrypted = secret_encrypted
            entry.backup_codes_hashed = list(backup_codes_hashed)
            entry.enabled = True
            entry.enabled_at = enabled_at
            entry.updated_at = now
            session.flush()
            return self._to_record(entry)

    def disable(self, account_id: int, purge: bool = True) -> bool:
        """Turn 2FA off. ``purge`` drops the encrypted secret and hashes too.

        Returns whether a record existed.
        """
        now = datetime.now(timezone.utc)
        with self._locks.hold(account_id), session_scope() as session:
            if purge:
                result = session.execute(
                    delete(TotpEnrollmentEntry).where(
                        TotpEnrollmentEntry.user_id == account_id
                    )
                )
                return result.rowcount > 0
            entry = self._select(session, account_id, for_update=True)
            if entry is None:
                return False
            entry.enabled = False
            entry.enabled_at = None
            entry.updated_at = now
            return True

    def replace_backup_codes(
        self, account_id: int, backup_codes_hashed: list[str]
    ) -> bool:
        now = datetime.now(timezone.utc)
        with self._locks.hold(account_id), session_scope() as session:
            entry = self._select(session, account_id, for_update=True)
            if entry is None or not entry.enabled:
                return False
            entry.backup_codes_hashed = list(backup_codes_hashed)
            entry.updated_at = now
            return True

    def consume_backup_code(
        self, account_id: int, matches: Callable[[str], bool]
    ) -> bool:
        """Remove the first stored hash for which ``matches`` is true.

        The read, the scan and the write happen under the account lock and a
        row lock, so concurrent uses of two different codes both land.
        """
        now = datetime.now(timezone.utc)
        with self._locks.hold(account_id), session_scope() as session:
            entry = self._select(session, account_id, for_update=True)
            if entry is None or not entry.enabled:
                return False
            hashes = list(entry.backup_codes_hashed or [])
            for index, hashed in enumerate(hashes):
                if matches(hashed):
                    del hashes[index]
                    entry.backup_codes_hashed = hashes
                    entry.updated_at = now
                    LOGGER.info(
                        "Backup code used for account %s, %s remaining",
                        account_id,
                        len(hashes),
                    )
                    return True
            return False

    def _select(self, session, account_id: int, for_update: bool = False):
        stmt = select(TotpEnrollmentEntry).where(
            TotpEnrollmentEntry.user_id == account_id
        )
        if for_update:
            stmt = stmt.with_for_update()
        return session.execute(stmt).scalar_one_or_none()

    def _to_record(self, entry: TotpEnrollmentEntry) -> TotpEnrollment:
        return TotpEnrollment(
            account_id=entry.user_id,
            secret_encrypted=entry.secret_encrypted,
            backup_codes_hashed=tuple(entry.backup_codes_hashed or ()),
            enabled=bool(entry.enabled),
            enabled_at=_as_utc(entry.enabled_at),
        )


totp_store = TotpStore()
