from dataclasses import dataclass
from datetime import datetime, timezone
import logging

import bcrypt
from sqlalchemy import select

from authgate.config import settings
from authgate.database import session_scope
from authgate.errors import InvalidCredentials
from authgate.models.user import UserEntry

LOGGER = logging.getLogger(__name__)

# compared against when the username is unknown so both failures cost the same
_DUMMY_HASH = bcrypt.hashpw(
    b"authgate-dummy-password", bcrypt.gensalt(rounds=settings.bcrypt_rounds)
)


@dataclass(frozen=True)
class Account:
    id: int
    username: str
    email: str | None = None

    @property
    def label(self) -> str:
        return self.email or self.username


def _normalize_username(username: str) -> str:
    return username.strip().lower()


def _normalize_email(email: str | None) -> str | None:
    if email is None:
        return None
    cleaned = email.strip().lower()
    return cleaned or None


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def _check_password(password: str, hashed: str | bytes) -> bool:
    if isinstance(hashed, str):
        hashed = hashed.encode("utf-8")
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed)
    except ValueError:
        return False


class UserStore:
    def create_user(
        self, username: str, password: str, email: str | None = None
    ) -> Account:
        now = datetime.now(timezone.utc)
        key = _normalize_username(username)
        normalized_email = _normalize_email(email)
        with session_scope() as session:
            existing = session.execute(
                select(UserEntry).where(UserEntry.username == key)
            ).scalar_one_or_none()
            if existing:
                raise ValueError("Username already in use")
            if normalized_email:
                existing_email = session.execute(
                    select(UserEntry).where(UserEntry.email == normalized_email)
                ).scalar_one_or_none()
                if existing_email:
                    raise ValueError("Email already in use")
            entry = UserEntry(
                username=key,
                email=normalized_email,
                password_hash=hash_password(password),
                created_at=now,
                updated_at=now,
            )
            session.add(entry)
            session.flush()
            return self._to_account(entry)

    def ensure_user(
        self, username: str, password: str, email: str | None = None
    ) -> Account:
        account = self.find_by_username(username)
        if account is not None:
            return account
        LOGGER.info("Seeding account %s", _normalize_username(username))
        return self.create_user(username, password, email=email)

    def get_account(self, user_id: int) -> Account | None:
        with session_scope() as session:
            entry = session.get(UserEntry, user_id)
            if entry is None:
                return None
            return self._to_account(entry)

    def find_by_username(self, username: str) -> Account | None:
        with session_scope() as session:
            entry = session.execute(
                select(UserEntry).where(
                    UserEntry.username == _normalize_username(username)
                )
            ).scalar_one_or_none()
            if entry is None:
                return None
            return self._to_account(entry)

    def authenticate(self, username: str, password: str) -> Account:
        with session_scope() as session:
            entry = session.execute(
                select(UserEntry).where(
                    UserEntry.username == _normalize_username(username)
                )
            ).scalar_one_or_none()
            if entry is None:
                _check_password(password, _DUMMY_HASH)
                raise InvalidCredentials("Invalid credentials")
            if not _check_password(password, entry.password_hash):
                raise InvalidCredentials("Invalid credentials")
            return self._to_account(entry)

    def verify_password(self, user_id: int, password: str) -> bool:
        with session_scope() as session:
            entry = session.get(UserEntry, user_id)
            if entry is None:
                return False
            return _check_password(password, entry.password_hash)

    def _to_account(self, entry: UserEntry) -> Account:
        return Account(id=entry.id, username=entry.username, email=entry.email)


user_store = UserStore()
