from enum import Enum


class ErrorKind(str, Enum):
    ACCOUNT_NOT_FOUND = "account_not_found"
    NO_PENDING_ENROLLMENT = "no_pending_enrollment"
    INVALID_CODE = "invalid_code"
    NOT_ENROLLED = "not_enrolled"
    TOKEN_EXPIRED = "token_expired"
    INVALID_TOKEN_KEY = "invalid_token_key"
    INVALID_SESSION = "invalid_session"
    INVALID_CREDENTIALS = "invalid_credentials"
    DECRYPTION_ERROR = "decryption_error"
    TOO_MANY_ATTEMPTS = "too_many_attempts"


class AuthError(Exception):
    """``kind`` is what transports translate; the message is for logs and tests."""

    kind: ErrorKind

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.kind.value.replace("_", " "))


class AccountNotFound(AuthError):
    kind = ErrorKind.ACCOUNT_NOT_FOUND


class NoPendingEnrollment(AuthError):
    kind = ErrorKind.NO_PENDING_ENROLLMENT


class InvalidCode(AuthError):
    kind = ErrorKind.INVALID_CODE


class NotEnrolled(AuthError):
    kind = ErrorKind.NOT_ENROLLED


class TokenExpired(AuthError):
    kind = ErrorKind.TOKEN_EXPIRED


class InvalidTokenKey(AuthError):
    kind = ErrorKind.INVALID_TOKEN_KEY


class InvalidSessionToken(AuthError):
    kind = ErrorKind.INVALID_SESSION


class InvalidCredentials(AuthError):
    kind = ErrorKind.INVALID_CREDENTIALS


class DecryptionError(AuthError):
    kind = ErrorKind.DECRYPTION_ERROR


class TooManyAttempts(AuthError):
    kind = ErrorKind.TOO_MANY_ATTEMPTS
