import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

TOTP_CODE_LENGTH = 6


class TotpCodeRequest(BaseModel):
    code: str = Field(min_length=TOTP_CODE_LENGTH, max_length=TOTP_CODE_LENGTH + 2)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        digits = re.sub(r"\s", "", value)
        if len(digits) != TOTP_CODE_LENGTH or not digits.isdigit():
            raise ValueError("Code must be 6 digits")
        return digits


class PasswordConfirmRequest(BaseModel):
    password: str = Field(min_length=1, max_length=128)


class TotpSetupResponse(BaseModel):
    secret: str
    otpauth_url: str
    backup_codes: list[str]


class TotpStatusResponse(BaseModel):
    enabled: bool
    enabled_at: Optional[datetime] = None


class BackupCodesResponse(BaseModel):
    backup_codes: list[str]


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
