from fastapi import APIRouter, Depends

from authgate.errors import InvalidCode, InvalidCredentials
from authgate.routers.users import get_current_user_id
from authgate.schemas.totp import (
    BackupCodesResponse,
    PasswordConfirmRequest,
    SuccessResponse,
    TotpCodeRequest,
    TotpSetupResponse,
    TotpStatusResponse,
)
from authgate.services.enrollment import enrollment_service
from authgate.services.users import user_store

router = APIRouter(prefix="/totp", tags=["totp"])


def _require_password(user_id: int, password: str) -> None:
    if not user_store.verify_password(user_id, password):
        raise InvalidCredentials("Invalid password")


@router.post("/setup", response_model=TotpSetupResponse)
def setup(user_id: int = Depends(get_current_user_id)) -> TotpSetupResponse:
    enrollment = enrollment_service.begin(user_id)
    return TotpSetupResponse(
        secret=enrollment.secret,
        otpauth_url=enrollment.otpauth_url,
        backup_codes=enrollment.backup_codes,
    )


@router.post("/verify", response_model=SuccessResponse)
def verify(
    payload: TotpCodeRequest, user_id: int = Depends(get_current_user_id)
) -> SuccessResponse:
    if not enrollment_service.confirm(user_id, payload.code):
        raise InvalidCode("Invalid code")
    return SuccessResponse(message="Code verified")


@router.post("/enable", response_model=TotpStatusResponse)
def enable(
    payload: TotpCodeRequest, user_id: int = Depends(get_current_user_id)
) -> TotpStatusResponse:
    status = enrollment_service.enable(user_id, payload.code)
    return TotpStatusResponse(enabled=status.enabled, enabled_at=status.enabled_at)


@router.post("/disable", response_model=TotpStatusResponse)
def disable(
    payload: PasswordConfirmRequest, user_id: int = Depends(get_current_user_id)
) -> TotpStatusResponse:
    _require_password(user_id, payload.password)
    status = enrollment_service.disable(user_id)
    return TotpStatusResponse(enabled=status.enabled, enabled_at=status.enabled_at)


@router.get("/status", response_model=TotpStatusResponse)
def get_status(user_id: int = Depends(get_current_user_id)) -> TotpStatusResponse:
    status = enrollment_service.status(user_id)
    return TotpStatusResponse(enabled=status.enabled, enabled_at=status.enabled_at)


@router.post("/backup-codes", response_model=BackupCodesResponse)
def regenerate_backup_codes(
    payload: PasswordConfirmRequest, user_id: int = Depends(get_current_user_id)
) -> BackupCodesResponse:
    _require_password(user_id, payload.password)
    return BackupCodesResponse(
        backup_codes=enrollment_service.regenerate_backup_codes(user_id)
    )
