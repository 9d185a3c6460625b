from fastapi import APIRouter, Depends, Request
from punchclock.db import get_store
from punchclock.schemas.auth import LoginResponse, UserLogin, UserProfileOut
from punchclock.schemas.employee import EmployeeOut
from punchclock.services.auth_service import authenticate, create_access_token
from punchclock.utils.auth import Principal, get_current_principal
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(user_login: UserLogin, request: Request):
    store = get_store()
    credential = await authenticate(store, user_login.email, user_login.password)

    access_token = create_access_token(credential.email, credential.role)
    logger.info("Login for %s from %s", credential.email, request.client.host if request.client else "unknown")

    response = LoginResponse(
        token=access_token,  # Frontend expects this field name
        access_token=access_token,
        role=credential.role.value,
    )
    if credential.employee_id is not None:
        employee = await store.find_employee(credential.employee_id)
        if employee is not None:
            response.employeeId = employee.id
            response.employeeFullName = employee.full_name
            response.department = employee.department
    return response


@router.get("/me", response_model=UserProfileOut)
async def me(principal: Principal = Depends(get_current_principal)):
    profile = UserProfileOut(
        id=principal.credential_id,
        email=principal.email,
        role=principal.role.value,
        employeeId=principal.employee_id,
    )
    if principal.employee_id is not None:
        employee = await get_store().find_employee(principal.employee_id)
        if employee is not None:
            profile.employee = EmployeeOut.from_model(employee)
    return profile
