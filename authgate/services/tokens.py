import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from authgate.config import settings
from authgate.errors import InvalidSessionToken, InvalidTokenKey, TokenExpired

ACCESS_TOKEN_TYPE = "access"
TOKEN_KEY_TYPE = "2fa-token-key"


@dataclass(frozen=True)
class AccessTokenData:
    user_id: int
    username: str
    token_id: str


@dataclass(frozen=True)
class TokenKeyData:
    user_id: int
    username: str


@dataclass(frozen=True)
class SessionCredential:
    access_token: str
    expires_in_seconds: int
    token_type: str = "bearer"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _signing_secret() -> str:
    if not settings.jwt_secret:
        raise RuntimeError("JWT secret is not configured")
    return settings.jwt_secret


def _encode(payload: dict, lifetime: timedelta) -> str:
    now = _utcnow()
    payload = {
        **payload,
        "iat": int(now.timestamp()),
        "exp": int((now + lifetime).timestamp()),
    }
    return jwt.encode(payload, _signing_secret(), algorithm=settings.jwt_algorithm)


def create_access_token(user_id: int, username: str) -> SessionCredential:
    lifetime = timedelta(minutes=settings.access_token_expire_minutes)
    token = _encode(
        {
            "sub": str(user_id),
            "username": username,
            "type": ACCESS_TOKEN_TYPE,
            "jti": uuid.uuid4().hex,
        },
        lifetime,
    )
    return SessionCredential(
        access_token=token, expires_in_seconds=int(lifetime.total_seconds())
    )


def create_token_key(
    user_id: int, username: str, expires_in_seconds: int | None = None
) -> str:
    if expires_in_seconds is None:
        lifetime = timedelta(minutes=settings.token_key_expire_minutes)
    else:
        lifetime = timedelta(seconds=expires_in_seconds)
    return _encode(
        {"sub": str(user_id), "username": username, "type": TOKEN_KEY_TYPE},
        lifetime,
    )


def decode_access_token(token: str) -> AccessTokenData:
    if not token:
        raise InvalidSessionToken("Token is missing")
    try:
        payload = _decode(token)
    except jwt.ExpiredSignatureError as exc:
        raise InvalidSessionToken("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidSessionToken("Invalid token") from exc
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise InvalidSessionToken("Invalid token type")
    user_id = _parse_subject(payload, InvalidSessionToken)
    return AccessTokenData(
        user_id=user_id,
        username=str(payload.get("username", "")),
        token_id=str(payload.get("jti", "")),
    )


def decode_token_key(token_key: str) -> TokenKeyData:
    if not token_key:
        raise InvalidTokenKey("Token key is missing")
    try:
        payload = _decode(token_key)
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpired("Token key has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenKey("Invalid token key") from exc
    if payload.get("type") != TOKEN_KEY_TYPE:
        raise InvalidTokenKey("Invalid token key type")
    user_id = _parse_subject(payload, InvalidTokenKey)
    return TokenKeyData(user_id=user_id, username=str(payload.get("username", "")))


def _decode(token: str) -> dict:
    return jwt.decode(
        token,
        _signing_secret(),
        algorithms=[settings.jwt_algorithm],
        options={"require": ["exp", "iat", "sub"]},
    )


def _parse_subject(payload: dict, error: type) -> int:
    subject = payload.get("sub")
    if not subject:
        raise error("Token subject is missing")
    try:
        return int(subject)
    except (TypeError, ValueError) as exc:
        raise error("Invalid token subject") from exc
