from dataclasses import dataclass
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from punchclock.db import get_store
from punchclock.models.enums import Role
from punchclock.services.auth_service import TokenError, decode_access_token
from punchclock.utils.errors import ForbiddenError, UnauthorizedError
import logging

# ---------------------------------------------------------------------------
# Logger setup - using module namespace helps identify origin in aggregated logs
# ---------------------------------------------------------------------------
logger = logging.getLogger(__name__)

# auto_error=False: a missing header means an anonymous request, not a 403
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    credential_id: int
    email: str
    role: Role
    employee_id: Optional[int] = None


def has_role(principal: Optional[Principal], *required_roles: Role) -> bool:
    return principal is not None and principal.role in required_roles


async def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Principal]:
    """Resolve the request's principal, or None for an anonymous request.

    Bad, expired or orphaned tokens are logged and treated as anonymous; the
    route's role requirement decides whether that is acceptable.
    """
    if credentials is None:
        return None

    try:
        payload = decode_access_token(credentials.credentials)
    except TokenError as e:
        logger.debug("Ignoring bearer token: %s", e)
        return None

    credential = await get_store().find_credential_by_email(payload["sub"])
    if credential is None:
        logger.debug("Token subject %s no longer resolves", payload["sub"])
        return None

    return Principal(
        credential_id=credential.id,
        email=credential.email,
        role=credential.role,
        employee_id=credential.employee_id,
    )


async def get_current_principal(principal: Optional[Principal] = Depends(get_principal)) -> Principal:
    if principal is None:
        raise UnauthorizedError("Authentication required.")
    return principal


def verify_role(required_roles: list):
    async def role_checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not has_role(principal, *required_roles):
            raise ForbiddenError("Insufficient permissions.")
        return principal
    return role_checker


# Role-specific dependencies
require_admin = verify_role([Role.ADMIN])
require_employee = verify_role([Role.EMPLOYEE])
require_employee_or_admin = verify_role([Role.EMPLOYEE, Role.ADMIN])


def ensure_owner_or_admin(principal: Principal, employee_id: int):
    if principal.role == Role.ADMIN:
        return
    if principal.employee_id is None or principal.employee_id != employee_id:
        raise ForbiddenError("You can only access your own records.")


def require_linked_employee(principal: Principal) -> int:
    if principal.employee_id is None:
        raise ForbiddenError("This account is not linked to an employee record.")
    return principal.employee_id
