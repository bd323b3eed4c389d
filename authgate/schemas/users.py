from typing import Optional

from pydantic import BaseModel


class AccountResponse(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    totp_enabled: bool = False
