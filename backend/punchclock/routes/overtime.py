from fastapi import APIRouter, Depends
from typing import Dict, List
from punchclock.db import get_store
from punchclock.models.employee import Employee
from punchclock.models.overtime import OvertimeRequest
from punchclock.schemas.overtime import OvertimeRequestCreate, OvertimeRequestOut
from punchclock.services.overtime_service import OvertimeWorkflow
from punchclock.utils.auth import Principal, require_admin, require_employee, require_linked_employee

router = APIRouter()


def get_overtime_workflow() -> OvertimeWorkflow:
    return OvertimeWorkflow(get_store())


async def _with_employees(requests: List[OvertimeRequest]) -> List[OvertimeRequestOut]:
    store = get_store()
    employees: Dict[int, Employee] = {}
    out = []
    for request in requests:
        if request.employee_id not in employees:
            employees[request.employee_id] = await store.find_employee(request.employee_id)
        out.append(OvertimeRequestOut.from_model(request, employees[request.employee_id]))
    return out


@router.post("/request", response_model=OvertimeRequestOut, status_code=201)
async def submit_request(
    body: OvertimeRequestCreate,
    principal: Principal = Depends(require_employee),
    workflow: OvertimeWorkflow = Depends(get_overtime_workflow),
):
    employee_id = require_linked_employee(principal)
    request = await workflow.submit(employee_id, body.overtimeDate, body.requestedHours, body.reason)
    return (await _with_employees([request]))[0]


@router.get("/employee/pending", response_model=List[OvertimeRequestOut])
async def get_employee_pending_requests(
    principal: Principal = Depends(require_employee),
    workflow: OvertimeWorkflow = Depends(get_overtime_workflow),
):
    employee_id = require_linked_employee(principal)
    return await _with_employees(await workflow.list_pending(employee_id))


@router.get("/employee/approved", response_model=List[OvertimeRequestOut])
async def get_employee_approved_requests(
    principal: Principal = Depends(require_employee),
    workflow: OvertimeWorkflow = Depends(get_overtime_workflow),
):
    employee_id = require_linked_employee(principal)
    return await _with_employees(await workflow.list_approved(employee_id))


@router.get("/admin/pending", response_model=List[OvertimeRequestOut])
async def get_all_pending_requests(
    principal: Principal = Depends(require_admin),
    workflow: OvertimeWorkflow = Depends(get_overtime_workflow),
):
    return await _with_employees(await workflow.list_all_pending())


@router.put("/admin/approve/{request_id}", response_model=OvertimeRequestOut)
async def approve_request(
    request_id: int,
    principal: Principal = Depends(require_admin),
    workflow: OvertimeWorkflow = Depends(get_overtime_workflow),
):
    return (await _with_employees([await workflow.approve(request_id)]))[0]


@router.put("/admin/reject/{request_id}", response_model=OvertimeRequestOut)
async def reject_request(
    request_id: int,
    principal: Principal = Depends(require_admin),
    workflow: OvertimeWorkflow = Depends(get_overtime_workflow),
):
    return (await _with_employees([await workflow.reject(request_id)]))[0]
