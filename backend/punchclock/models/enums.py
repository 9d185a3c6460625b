from enum import Enum


class PunchType(str, Enum):
    IN = "IN"
    OUT = "OUT"


class OvertimeStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Role(str, Enum):
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"
