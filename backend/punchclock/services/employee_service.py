import logging
import secrets
from typing import List, Optional
from pydantic import ValidationError as PydanticValidationError

from punchclock.models.credential import Credential
from punchclock.models.employee import Employee
from punchclock.models.enums import Role
from punchclock.services.auth_service import hash_password
from punchclock.services.password_setup_service import PasswordSetupService
from punchclock.store.base import AttendanceStore
from punchclock.utils.errors import ConflictError, NotFoundError, ValidationError
from punchclock.utils.logger import EventTypes, log_event

logger = logging.getLogger(__name__)


class EmployeeService:
    def __init__(self, store: AttendanceStore, password_setup: Optional[PasswordSetupService] = None):
        self.store = store
        self.password_setup = password_setup or PasswordSetupService(store)

    async def get(self, employee_id: int) -> Employee:
        employee = await self.store.find_employee(employee_id)
        if employee is None:
            raise NotFoundError(f"Employee with ID {employee_id} not found.")
        return employee

    async def list(self) -> List[Employee]:
        return await self.store.list_employees()

    async def create(self, employee: Employee, role: Role = Role.EMPLOYEE, provision_account: bool = True) -> Employee:
        """Add an employee and, unless told otherwise, a login for them.

        The new credential gets an unguessable placeholder password and a
        setup link is sent so the employee chooses their own.
        """
        if await self.store.find_employee_by_email(employee.email):
            raise ConflictError(f"An employee with email {employee.email} already exists.", code="EMAIL_TAKEN")
        if provision_account and await self.store.find_credential_by_email(employee.email):
            raise ConflictError(f"An account with email {employee.email} already exists.", code="EMAIL_TAKEN")

        stored = await self.store.insert_employee(employee.model_copy(update={"id": None}))
        await log_event(EventTypes.EMPLOYEE_CREATED, {"employee_id": stored.id})

        if provision_account:
            await self.store.insert_credential(
                Credential(
                    employee_id=stored.id,
                    email=stored.email,
                    password_hash=hash_password(secrets.token_urlsafe(32)),
                    role=role,
                )
            )
            await self.password_setup.initiate(stored.email)
        return stored

    async def update(self, employee_id: int, changes: dict) -> Employee:
        """Apply ``changes`` (snake_case field names).

        A new email moves the employee's linked login to the same address.
        """
        existing = await self.get(employee_id)
        # re-validate so the email is normalised the same way as on create
        try:
            updated = Employee.model_validate(
                {**existing.model_dump(), **{k: v for k, v in changes.items() if k != "id"}}
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid employee data: {e.errors()[0]['msg']}")

        credential = None
        email_changed = updated.email != existing.email
        if email_changed:
            other = await self.store.find_employee_by_email(updated.email)
            if other is not None and other.id != employee_id:
                raise ConflictError(f"An employee with email {updated.email} already exists.", code="EMAIL_TAKEN")
            credential = await self.store.find_credential_by_employee(employee_id)
            if credential is not None:
                owner = await self.store.find_credential_by_email(updated.email)
                if owner is not None and owner.id != credential.id:
                    raise ConflictError(f"An account with email {updated.email} already exists.", code="EMAIL_TAKEN")

        result = await self.store.update_employee(updated)
        if result is None:
            raise NotFoundError(f"Employee with ID {employee_id} not found.")
        if credential is not None:
            await self.store.update_credential_email(credential.id, updated.email)
        await log_event(EventTypes.EMPLOYEE_UPDATED, {"employee_id": employee_id, "fields": sorted(changes)})
        return result

    async def delete(self, employee_id: int):
        await self.get(employee_id)
        credential = await self.store.find_credential_by_employee(employee_id)
        if credential is not None:
            await self.store.delete_credential(credential.id)
        await self.store.delete_employee(employee_id)
        await log_event(EventTypes.EMPLOYEE_DELETED, {"employee_id": employee_id})
