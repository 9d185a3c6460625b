from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import date
from punchclock.models.employee import Employee


class EmployeeCreate(BaseModel):
    firstName: str
    lastName: str
    email: EmailStr
    department: Optional[str] = None
    position: Optional[str] = None
    contactNumber: Optional[str] = None
    address: Optional[str] = None
    hireDate: Optional[date] = None
    role: str = "EMPLOYEE"
    createAccount: bool = True

    def to_model(self) -> Employee:
        return Employee(
            first_name=self.firstName,
            last_name=self.lastName,
            email=self.email,
            department=self.department,
            position=self.position,
            contact_number=self.contactNumber,
            address=self.address,
            hire_date=self.hireDate,
        )


class EmployeeUpdate(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    position: Optional[str] = None
    contactNumber: Optional[str] = None
    address: Optional[str] = None
    hireDate: Optional[date] = None

    def to_changes(self) -> dict:
        field_map = {
            "firstName": "first_name",
            "lastName": "last_name",
            "email": "email",
            "department": "department",
            "position": "position",
            "contactNumber": "contact_number",
            "address": "address",
            "hireDate": "hire_date",
        }
        return {field_map[k]: v for k, v in self.model_dump(exclude_unset=True).items()}


class EmployeeOut(BaseModel):
    id: int
    firstName: str
    lastName: str
    email: str
    department: Optional[str] = None
    position: Optional[str] = None
    contactNumber: Optional[str] = None
    address: Optional[str] = None
    hireDate: Optional[date] = None

    @classmethod
    def from_model(cls, employee: Employee) -> "EmployeeOut":
        return cls(
            id=employee.id,
            firstName=employee.first_name,
            lastName=employee.last_name,
            email=employee.email,
            department=employee.department,
            position=employee.position,
            contactNumber=employee.contact_number,
            address=employee.address,
            hireDate=employee.hire_date,
        )
