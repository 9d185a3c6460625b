from fastapi import APIRouter, Depends
from typing import List
from punchclock.db import get_store
from punchclock.models.enums import Role
from punchclock.schemas.employee import EmployeeCreate, EmployeeOut, EmployeeUpdate
from punchclock.services.employee_service import EmployeeService
from punchclock.utils.auth import Principal, ensure_owner_or_admin, require_admin, require_employee_or_admin
from punchclock.utils.errors import ValidationError

router = APIRouter()


def get_employee_service() -> EmployeeService:
    return EmployeeService(get_store())


@router.get("/all", response_model=List[EmployeeOut])
async def get_all_employees(
    principal: Principal = Depends(require_admin),
    service: EmployeeService = Depends(get_employee_service),
):
    return [EmployeeOut.from_model(e) for e in await service.list()]


@router.get("/{employee_id}", response_model=EmployeeOut)
async def get_employee(
    employee_id: int,
    principal: Principal = Depends(require_employee_or_admin),
    service: EmployeeService = Depends(get_employee_service),
):
    ensure_owner_or_admin(principal, employee_id)
    return EmployeeOut.from_model(await service.get(employee_id))


@router.post("", response_model=EmployeeOut, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    principal: Principal = Depends(require_admin),
    service: EmployeeService = Depends(get_employee_service),
):
    try:
        role = Role(body.role.upper())
    except ValueError:
        raise ValidationError(f"Unknown role: {body.role}")
    employee = await service.create(body.to_model(), role=role, provision_account=body.createAccount)
    return EmployeeOut.from_model(employee)


@router.put("/{employee_id}", response_model=EmployeeOut)
async def update_employee(
    employee_id: int,
    body: EmployeeUpdate,
    principal: Principal = Depends(require_admin),
    service: EmployeeService = Depends(get_employee_service),
):
    return EmployeeOut.from_model(await service.update(employee_id, body.to_changes()))


@router.delete("/{employee_id}", status_code=204)
async def delete_employee(
    employee_id: int,
    principal: Principal = Depends(require_admin),
    service: EmployeeService = Depends(get_employee_service),
):
    await service.delete(employee_id)
