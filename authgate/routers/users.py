from fastapi import APIRouter, Depends, Header

from authgate.errors import InvalidSessionToken
from authgate.schemas.users import AccountResponse
from authgate.services.tokens import decode_access_token
from authgate.services.totp_store import totp_store
from authgate.services.users import user_store

router = APIRouter(prefix="/users", tags=["users"])


def get_current_user_id(authorization: str | None = Header(default=None)) -> int:
    if not authorization:
        raise InvalidSessionToken("Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise InvalidSessionToken("Invalid Authorization header")
    access_data = decode_access_token(token.strip())
    if user_store.get_account(access_data.user_id) is None:
        raise InvalidSessionToken("Account no longer exists")
    return access_data.user_id


@router.get("/me", response_model=AccountResponse)
def get_me(user_id: int = Depends(get_current_user_id)) -> AccountResponse:
    account = user_store.get_account(user_id)
    if account is None:
        raise InvalidSessionToken("Account no longer exists")
    return AccountResponse(
        id=account.id,
        username=account.username,
        email=account.email,
        totp_enabled=totp_store.is_enabled(account.id),
    )
