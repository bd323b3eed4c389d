import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from authgate.errors import AuthError, ErrorKind

LOGGER = logging.getLogger(__name__)

# Messages stay generic so responses do not reveal which factor failed or
# what state an account's 2FA is in.
ERROR_RESPONSES: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.ACCOUNT_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Account not found"),
    ErrorKind.NO_PENDING_ENROLLMENT: (
        status.HTTP_400_BAD_REQUEST,
        "No TOTP setup in progress. Please start setup first.",
    ),
    ErrorKind.INVALID_CODE: (status.HTTP_400_BAD_REQUEST, "Invalid code"),
    ErrorKind.NOT_ENROLLED: (
        status.HTTP_400_BAD_REQUEST,
        "Two-factor authentication is not enabled",
    ),
    ErrorKind.TOKEN_EXPIRED: (status.HTTP_401_UNAUTHORIZED, "Session expired"),
    ErrorKind.INVALID_TOKEN_KEY: (status.HTTP_401_UNAUTHORIZED, "Session expired"),
    ErrorKind.INVALID_SESSION: (
        status.HTTP_401_UNAUTHORIZED,
        "Invalid or expired token",
    ),
    ErrorKind.INVALID_CREDENTIALS: (
        status.HTTP_401_UNAUTHORIZED,
        "Invalid credentials",
    ),
    ErrorKind.DECRYPTION_ERROR: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
    ),
    ErrorKind.TOO_MANY_ATTEMPTS: (
        status.HTTP_429_TOO_MANY_REQUESTS,
        "Too many attempts. Please try again later.",
    ),
}


def error_response(kind: ErrorKind) -> tuple[int, str]:
    return ERROR_RESPONSES.get(
        kind, (status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
    )


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    status_code, detail = error_response(exc.kind)
    # services log their own server-side failures with account context
    LOGGER.info("%s on %s -> %s", exc.kind.value, request.url.path, status_code)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail},
        headers=headers,
    )
