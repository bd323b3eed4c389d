from dataclasses import dataclass
import logging

from authgate.config import Settings, settings
from authgate.errors import AccountNotFound, DecryptionError, InvalidCode, NotEnrolled
from authgate.services.throttle import AttemptLimiter, attempt_limiter
from authgate.services.tokens import (
    SessionCredential,
    create_access_token,
    create_token_key,
    decode_token_key,
)
from authgate.services.totp import verify_code
from authgate.services.totp_store import TotpStore, totp_store
from authgate.services.users import Account, UserStore, user_store
from authgate.services.vault import SecretVault, vault

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    requires_totp: bool
    session: SessionCredential | None = None
    token_key: str | None = None


class LoginService:
    def __init__(
        self,
        users: UserStore,
        store: TotpStore,
        secret_vault: SecretVault,
        limiter: AttemptLimiter,
        config: Settings = settings,
    ) -> None:
        self._users = users
        self._store = store
        self._vault = secret_vault
        self._limiter = limiter
        self._config = config

    def authenticate(self, username: str, password: str) -> LoginResult:
        account = self._users.authenticate(username, password)
        return self.issue_token_key_or_session(account)

    def issue_token_key_or_session(self, account: Account) -> LoginResult:
        if self._store.is_enabled(account.id):
            return LoginResult(
                requires_totp=True,
                token_key=create_token_key(account.id, account.username),
            )
        return LoginResult(
            requires_totp=False,
            session=create_access_token(account.id, account.username),
        )

    def complete_login(self, token_key: str, code: str) -> SessionCredential:
        claims = decode_token_key(token_key)
        throttle_key = f"login:{claims.user_id}"
        self._limiter.acquire(throttle_key)

        record = self._store.get(claims.user_id)
        if record is None or not record.enabled:
            raise NotEnrolled("Two-factor authentication is not enabled")

        try:
            secret = self._vault.decrypt(record.secret_encrypted)
        except DecryptionError:
            LOGGER.error(
                "Stored TOTP secret for account %s failed to decrypt; "
                "data is corrupt or the encryption key changed",
                claims.user_id,
            )
            raise

        # before any backup code is spent
        account = self._users.get_account(claims.user_id)
        if account is None:
            raise AccountNotFound("Account not found")

        if not self._matches_totp(code, secret) and not self._consume_backup_code(
            account.id, code
        ):
            raise InvalidCode("Invalid code")

        self._limiter.reset(throttle_key)
        return create_access_token(account.id, account.username)

    def _matches_totp(self, code: str, secret: str) -> bool:
        return verify_code(code, secret, window=self._config.totp_window)

    def _consume_backup_code(self, account_id: int, code: str) -> bool:
        return self._store.consume_backup_code(
            account_id, lambda hashed: self._vault.verify_backup_code_hash(code, hashed)
        )


login_service = LoginService(user_store, totp_store, vault, attempt_limiter)
