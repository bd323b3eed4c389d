from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=128)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Username is required")
        return cleaned


class LoginResponse(BaseModel):
    requires_totp: bool
    access_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_in_seconds: Optional[int] = None
    token_key: Optional[str] = None


class Login2FARequest(BaseModel):
    token_key: str = Field(min_length=10, max_length=2048)
    # six-digit TOTP or a backup code of any configured length
    code: str = Field(min_length=1, max_length=32)

    @field_validator("code")
    @classmethod
    def strip_code(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Code is required")
        return cleaned


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in_seconds: int
