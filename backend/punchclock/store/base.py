from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from punchclock.models.credential import Credential
from punchclock.models.employee import Employee
from punchclock.models.enums import OvertimeStatus, PunchType
from punchclock.models.overtime import OvertimeRequest
from punchclock.models.punch import Punch


class AttendanceStore(ABC):
    """Persistence contract used by every service.

    The conditional writes (``insert_punch_if_state``, ``transition_overtime``,
    ``redeem_reset_token``) must be atomic: the check and the write happen in
    one step, so concurrent callers cannot both succeed.
    """

    # employees

    @abstractmethod
    async def find_employee(self, employee_id: int) -> Optional[Employee]:
        ...

    @abstractmethod
    async def find_employee_by_email(self, email: str) -> Optional[Employee]:
        ...

    @abstractmethod
    async def list_employees(self) -> List[Employee]:
        ...

    @abstractmethod
    async def insert_employee(self, employee: Employee) -> Employee:
        ...

    @abstractmethod
    async def update_employee(self, employee: Employee) -> Optional[Employee]:
        ...

    @abstractmethod
    async def delete_employee(self, employee_id: int) -> bool:
        ...

    # punches

    @abstractmethod
    async def find_last_punch_by_employee(self, employee_id: int) -> Optional[Punch]:
        ...

    @abstractmethod
    async def find_punches_by_employee(self, employee_id: int) -> List[Punch]:
        """All punches of one employee, oldest first."""

    @abstractmethod
    async def find_punches_in_range(self, employee_id: int, start: datetime, end: datetime) -> List[Punch]:
        """Punches of one employee with start <= timestamp <= end, oldest first."""

    @abstractmethod
    async def find_punches_between(self, start: datetime, end: datetime) -> List[Punch]:
        ...

    @abstractmethod
    async def find_all_punches_desc(self, limit: Optional[int] = None) -> List[Punch]:
        ...

    @abstractmethod
    async def insert_punch_if_state(self, punch: Punch, expected_state: PunchType) -> Optional[Punch]:
        """Store ``punch`` only if the employee's session state is still
        ``expected_state``. Returns the stored punch, or None if the state
        changed underneath the caller."""

    # overtime requests

    @abstractmethod
    async def insert_overtime(self, request: OvertimeRequest) -> OvertimeRequest:
        ...

    @abstractmethod
    async def find_overtime(self, request_id: int) -> Optional[OvertimeRequest]:
        ...

    @abstractmethod
    async def find_overtime_by_status(self, status: OvertimeStatus) -> List[OvertimeRequest]:
        ...

    @abstractmethod
    async def find_overtime_by_employee_and_status(
        self, employee_id: int, status: OvertimeStatus
    ) -> List[OvertimeRequest]:
        ...

    @abstractmethod
    async def transition_overtime(
        self, request_id: int, from_status: OvertimeStatus, to_status: OvertimeStatus
    ) -> Optional[OvertimeRequest]:
        """Compare-and-set on status. None if the request is missing or not
        in ``from_status``."""

    # credentials

    @abstractmethod
    async def find_credential_by_email(self, email: str) -> Optional[Credential]:
        ...

    @abstractmethod
    async def find_credential_by_reset_token(self, token: str) -> Optional[Credential]:
        ...

    @abstractmethod
    async def find_credential_by_employee(self, employee_id: int) -> Optional[Credential]:
        ...

    @abstractmethod
    async def insert_credential(self, credential: Credential) -> Credential:
        ...

    @abstractmethod
    async def delete_credential(self, credential_id: int) -> bool:
        ...

    @abstractmethod
    async def update_credential_email(self, credential_id: int, email: str) -> bool:
        """Move a login to a new address; False if the credential is gone."""

    @abstractmethod
    async def count_credentials(self) -> int:
        ...

    @abstractmethod
    async def set_reset_token(self, credential_id: int, token: str, expires_at: datetime) -> bool:
        ...

    @abstractmethod
    async def clear_reset_token(self, credential_id: int) -> bool:
        ...

    @abstractmethod
    async def redeem_reset_token(self, token: str, password_hash: str) -> bool:
        """Set the password and clear the token in one step. False if the
        token was already used."""

    @abstractmethod
    async def clear_expired_reset_tokens(self, now: datetime) -> int:
        ...

    async def ping(self) -> bool:
        return True
