from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional
from datetime import datetime
from punchclock.models.enums import Role


class Credential(BaseModel):
    id: Optional[int] = None
    employee_id: Optional[int] = None  # admins may have no employee record
    email: EmailStr
    password_hash: str
    role: Role
    reset_token: Optional[str] = None
    reset_token_expires_at: Optional[datetime] = None

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        # stored lowercase so exact-match lookups are case-insensitive
        return v.lower()
