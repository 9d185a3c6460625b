from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional
from datetime import date


class Employee(BaseModel):
    id: Optional[int] = None
    first_name: str
    last_name: str
    email: EmailStr
    department: Optional[str] = None
    position: Optional[str] = None
    contact_number: Optional[str] = None
    address: Optional[str] = None
    hire_date: Optional[date] = None

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
