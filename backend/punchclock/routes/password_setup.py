from fastapi import APIRouter, Depends
from punchclock.db import get_store
from punchclock.schemas.auth import PasswordSetupConfirm, PasswordSetupInitiate
from punchclock.services.password_setup_service import PasswordSetupService
from punchclock.utils.auth import Principal, require_admin

router = APIRouter()


def get_password_setup_service() -> PasswordSetupService:
    return PasswordSetupService(get_store())


@router.post("/initiate")
async def initiate_password_setup(
    body: PasswordSetupInitiate,
    principal: Principal = Depends(require_admin),
    service: PasswordSetupService = Depends(get_password_setup_service),
):
    await service.initiate(body.email)
    return {"success": True, "message": f"Password setup link sent to {body.email}"}


@router.post("/set")
async def set_password(
    body: PasswordSetupConfirm,
    service: PasswordSetupService = Depends(get_password_setup_service),
):
    await service.set_password(body.token, body.newPassword)
    return {"success": True, "message": "Password updated successfully."}
