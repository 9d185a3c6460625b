from pydantic import BaseModel, EmailStr, constr
from typing import Optional
from punchclock.schemas.employee import EmployeeOut


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    message: str = "Login successful"
    token: str
    access_token: str
    token_type: str = "bearer"
    role: str
    employeeId: Optional[int] = None
    employeeFullName: Optional[str] = None
    department: Optional[str] = None


class UserProfileOut(BaseModel):
    id: int
    email: str
    role: str
    employeeId: Optional[int] = None
    employee: Optional[EmployeeOut] = None


class PasswordSetupInitiate(BaseModel):
    email: EmailStr


class PasswordSetupConfirm(BaseModel):
    token: constr(min_length=1)
    newPassword: constr(min_length=8)
