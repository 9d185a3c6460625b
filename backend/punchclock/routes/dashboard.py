from fastapi import APIRouter, Depends, Query
from punchclock.db import get_store
from punchclock.services.dashboard_service import DashboardService
from punchclock.utils.auth import Principal, ensure_owner_or_admin, require_admin, require_employee_or_admin

admin_router = APIRouter()
employee_router = APIRouter()


def get_dashboard_service() -> DashboardService:
    return DashboardService(get_store())


@admin_router.get("/stats")
async def get_admin_dashboard_stats(
    principal: Principal = Depends(require_admin),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return await dashboard.admin_stats()


@admin_router.get("/recent-activity")
async def get_recent_activity(
    limit: int = Query(10, ge=1, le=100),
    principal: Principal = Depends(require_admin),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return await dashboard.recent_activity(limit)


@employee_router.get("/stats/{employee_id}")
async def get_employee_dashboard_stats(
    employee_id: int,
    principal: Principal = Depends(require_employee_or_admin),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    ensure_owner_or_admin(principal, employee_id)
    return await dashboard.employee_stats(employee_id)
