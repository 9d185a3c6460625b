import itertools
import threading
from datetime import datetime
from typing import Dict, List, Optional

from punchclock.models.credential import Credential
from punchclock.models.employee import Employee
from punchclock.models.enums import OvertimeStatus, PunchType
from punchclock.models.overtime import OvertimeRequest
from punchclock.models.punch import Punch
from punchclock.store.base import AttendanceStore


class MemoryStore(AttendanceStore):
    """Single-process store for development (``STORE_BACKEND=memory``) and
    the test suite.

    No method awaits while holding ``_lock``, so a plain threading lock is
    enough and the store can be shared between event loops.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._ids: Dict[str, itertools.count] = {}
        self._employees: Dict[int, Employee] = {}
        self._punches: Dict[int, Punch] = {}
        self._overtime: Dict[int, OvertimeRequest] = {}
        self._credentials: Dict[int, Credential] = {}

    def _next_id(self, name: str) -> int:
        counter = self._ids.setdefault(name, itertools.count(1))
        return next(counter)

    # employees

    async def find_employee(self, employee_id: int) -> Optional[Employee]:
        with self._lock:
            employee = self._employees.get(employee_id)
            return employee.model_copy() if employee else None

    async def find_employee_by_email(self, email: str) -> Optional[Employee]:
        with self._lock:
            for employee in self._employees.values():
                if employee.email.lower() == email.lower():
                    return employee.model_copy()
        return None

    async def list_employees(self) -> List[Employee]:
        with self._lock:
            return [e.model_copy() for _, e in sorted(self._employees.items())]

    async def insert_employee(self, employee: Employee) -> Employee:
        with self._lock:
            stored = employee.model_copy(update={"id": self._next_id("employees")})
            self._employees[stored.id] = stored
            return stored.model_copy()

    async def update_employee(self, employee: Employee) -> Optional[Employee]:
        with self._lock:
            if employee.id not in self._employees:
                return None
            self._employees[employee.id] = employee.model_copy()
            return employee.model_copy()

    async def delete_employee(self, employee_id: int) -> bool:
        with self._lock:
            return self._employees.pop(employee_id, None) is not None

    # punches

    def _employee_punches(self, employee_id: int) -> List[Punch]:
        punches = [p for p in self._punches.values() if p.employee_id == employee_id]
        return sorted(punches, key=lambda p: (p.timestamp, p.id))

    async def find_last_punch_by_employee(self, employee_id: int) -> Optional[Punch]:
        with self._lock:
            punches = self._employee_punches(employee_id)
            return punches[-1] if punches else None

    async def find_punches_by_employee(self, employee_id: int) -> List[Punch]:
        with self._lock:
            return self._employee_punches(employee_id)

    async def find_punches_in_range(self, employee_id: int, start: datetime, end: datetime) -> List[Punch]:
        with self._lock:
            return [p for p in self._employee_punches(employee_id) if start <= p.timestamp <= end]

    async def find_punches_between(self, start: datetime, end: datetime) -> List[Punch]:
        with self._lock:
            punches = [p for p in self._punches.values() if start <= p.timestamp <= end]
            return sorted(punches, key=lambda p: (p.timestamp, p.id))

    async def find_all_punches_desc(self, limit: Optional[int] = None) -> List[Punch]:
        with self._lock:
            punches = sorted(self._punches.values(), key=lambda p: (p.timestamp, p.id), reverse=True)
        return punches[:limit] if limit else punches

    async def insert_punch_if_state(self, punch: Punch, expected_state: PunchType) -> Optional[Punch]:
        with self._lock:
            punches = self._employee_punches(punch.employee_id)
            current = punches[-1].punch_type if punches else PunchType.OUT
            if current != expected_state:
                return None
            stored = punch.model_copy(update={"id": self._next_id("punches")})
            self._punches[stored.id] = stored
            return stored

    # overtime requests

    async def insert_overtime(self, request: OvertimeRequest) -> OvertimeRequest:
        with self._lock:
            stored = request.model_copy(update={"id": self._next_id("overtime_requests")})
            self._overtime[stored.id] = stored
            return stored.model_copy()

    async def find_overtime(self, request_id: int) -> Optional[OvertimeRequest]:
        with self._lock:
            request = self._overtime.get(request_id)
            return request.model_copy() if request else None

    async def find_overtime_by_status(self, status: OvertimeStatus) -> List[OvertimeRequest]:
        with self._lock:
            return [r.model_copy() for _, r in sorted(self._overtime.items()) if r.status == status]

    async def find_overtime_by_employee_and_status(
        self, employee_id: int, status: OvertimeStatus
    ) -> List[OvertimeRequest]:
        with self._lock:
            return [
                r.model_copy()
                for _, r in sorted(self._overtime.items())
                if r.employee_id == employee_id and r.status == status
            ]

    async def transition_overtime(
        self, request_id: int, from_status: OvertimeStatus, to_status: OvertimeStatus
    ) -> Optional[OvertimeRequest]:
        with self._lock:
            request = self._overtime.get(request_id)
            if request is None or request.status != from_status:
                return None
            updated = request.model_copy(update={"status": to_status})
            self._overtime[request_id] = updated
            return updated.model_copy()

    # credentials

    async def find_credential_by_email(self, email: str) -> Optional[Credential]:
        with self._lock:
            for credential in self._credentials.values():
                if credential.email.lower() == email.lower():
                    return credential.model_copy()
        return None

    async def find_credential_by_reset_token(self, token: str) -> Optional[Credential]:
        with self._lock:
            for credential in self._credentials.values():
                if credential.reset_token is not None and credential.reset_token == token:
                    return credential.model_copy()
        return None

    async def find_credential_by_employee(self, employee_id: int) -> Optional[Credential]:
        with self._lock:
            for credential in self._credentials.values():
                if credential.employee_id == employee_id:
                    return credential.model_copy()
        return None

    async def insert_credential(self, credential: Credential) -> Credential:
        with self._lock:
            stored = credential.model_copy(update={"id": self._next_id("credentials")})
            self._credentials[stored.id] = stored
            return stored.model_copy()

    async def delete_credential(self, credential_id: int) -> bool:
        with self._lock:
            return self._credentials.pop(credential_id, None) is not None

    async def update_credential_email(self, credential_id: int, email: str) -> bool:
        with self._lock:
            credential = self._credentials.get(credential_id)
            if credential is None:
                return False
            self._credentials[credential_id] = credential.model_copy(update={"email": email.lower()})
            return True

    async def count_credentials(self) -> int:
        with self._lock:
            return len(self._credentials)

    async def set_reset_token(self, credential_id: int, token: str, expires_at: datetime) -> bool:
        with self._lock:
            credential = self._credentials.get(credential_id)
            if credential is None:
                return False
            self._credentials[credential_id] = credential.model_copy(
                update={"reset_token": token, "reset_token_expires_at": expires_at}
            )
            return True

    async def clear_reset_token(self, credential_id: int) -> bool:
        return await self.set_reset_token(credential_id, None, None)

    async def redeem_reset_token(self, token: str, password_hash: str) -> bool:
        with self._lock:
            for credential_id, credential in self._credentials.items():
                if credential.reset_token is not None and credential.reset_token == token:
                    self._credentials[credential_id] = credential.model_copy(
                        update={
                            "password_hash": password_hash,
                            "reset_token": None,
                            "reset_token_expires_at": None,
                        }
                    )
                    return True
        return False

    async def clear_expired_reset_tokens(self, now: datetime) -> int:
        cleared = 0
        with self._lock:
            for credential_id, credential in list(self._credentials.items()):
                expires_at = credential.reset_token_expires_at
                if credential.reset_token and expires_at is not None and expires_at < now:
                    self._credentials[credential_id] = credential.model_copy(
                        update={"reset_token": None, "reset_token_expires_at": None}
                    )
                    cleared += 1
        return cleared
