from fastapi import APIRouter

from authgate.schemas.auth import (
    Login2FARequest,
    LoginRequest,
    LoginResponse,
    TokenResponse,
)
from authgate.services.login import login_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse, response_model_exclude_none=True)
def login(payload: LoginRequest) -> LoginResponse:
    result = login_service.authenticate(payload.username, payload.password)
    if result.requires_totp:
        return LoginResponse(requires_totp=True, token_key=result.token_key)
    return LoginResponse(
        requires_totp=False,
        access_token=result.session.access_token,
        token_type=result.session.token_type,
        expires_in_seconds=result.session.expires_in_seconds,
    )


@router.post("/login/2fa", response_model=TokenResponse)
def login_2fa(payload: Login2FARequest) -> TokenResponse:
    credential = login_service.complete_login(payload.token_key, payload.code)
    return TokenResponse(
        access_token=credential.access_token,
        token_type=credential.token_type,
        expires_in_seconds=credential.expires_in_seconds,
    )
