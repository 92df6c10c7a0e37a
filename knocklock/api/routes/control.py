# =======================================================================================
# knocklock/api/routes/control.py - Remote Unlock Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends, Response, status
from ...controller import LockController
from ...models.schemas import UnlockResponse, StatusResponse
from ...utils.exceptions import KnockLockError
from ..dependencies import get_controller, http_error

router = APIRouter()

@router.get("/status", response_model=StatusResponse)
async def get_status(controller: LockController = Depends(get_controller)):
    """Lock status plus mirror sizes and staleness."""
    return controller.status()

@router.post("/unlock", response_model=UnlockResponse)
async def remote_unlock(response: Response, controller: LockController = Depends(get_controller)):
    """
    Send a remote unlock to the device.
    A FAIL result comes back as 502 with status ERROR; the command may
    still have reached the device.
    """
    try:
        result = await controller.commands.issue_unlock()
    except KnockLockError as e:
        raise http_error(e)

    if result.result == "FAIL":
        response.status_code = status.HTTP_502_BAD_GATEWAY
    return result
