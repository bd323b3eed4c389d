"""Tests for session credentials and 2FA token keys."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from authgate.config import settings
from authgate.errors import InvalidSessionToken, InvalidTokenKey, TokenExpired
from authgate.services.tokens import (
    TOKEN_KEY_TYPE,
    create_access_token,
    create_token_key,
    decode_access_token,
    decode_token_key,
)


def test_access_token_round_trip():
    credential = create_access_token(7, "alice")
    data = decode_access_token(credential.access_token)
    assert data.user_id == 7
    assert data.username == "alice"
    assert data.token_id
    assert credential.token_type == "bearer"
    assert credential.expires_in_seconds == settings.access_token_expire_minutes * 60


def test_token_key_round_trip():
    data = decode_token_key(create_token_key(7, "alice"))
    assert data.user_id == 7
    assert data.username == "alice"


def test_token_key_lifetime_is_short():
    payload = jwt.decode(
        create_token_key(7, "alice"),
        options={"verify_signature": False},
    )
    assert payload["type"] == TOKEN_KEY_TYPE
    assert payload["exp"] - payload["iat"] == settings.token_key_expire_minutes * 60


def test_token_key_is_not_a_session_credential():
    with pytest.raises(InvalidSessionToken):
        decode_access_token(create_token_key(7, "alice"))


def test_session_credential_is_not_a_token_key():
    with pytest.raises(InvalidTokenKey):
        decode_token_key(create_access_token(7, "alice").access_token)


def test_expired_token_key():
    with pytest.raises(TokenExpired):
        decode_token_key(create_token_key(7, "alice", expires_in_seconds=-10))


def test_token_key_signed_with_other_secret():
    now = datetime.now(timezone.utc)
    forged = jwt.encode(
        {
            "sub": "7",
            "type": TOKEN_KEY_TYPE,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=5)).timestamp()),
        },
        "some-other-secret-that-is-long-enough-for-hs256",
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenKey):
        decode_token_key(forged)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_token_key(token):
    with pytest.raises(InvalidTokenKey):
        decode_token_key(token)


def test_expired_access_token():
    now = datetime.now(timezone.utc) - timedelta(hours=2)
    stale = jwt.encode(
        {
            "sub": "7",
            "type": "access",
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=1)).timestamp()),
        },
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(InvalidSessionToken):
        decode_access_token(stale)
