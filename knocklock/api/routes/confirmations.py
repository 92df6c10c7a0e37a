# =======================================================================================
# knocklock/api/routes/confirmations.py - Delete Confirmation Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends
from ...controller import LockController
from ...models.schemas import ActionResponse
from ...utils.exceptions import KnockLockError
from ..dependencies import get_controller, http_error

router = APIRouter()

@router.post("/confirmations/{token}", response_model=ActionResponse)
async def confirm_delete(token: str, controller: LockController = Depends(get_controller)):
    """Confirm a pending delete; the record leaves the mirror on the next push."""
    try:
        pending = await controller.entities.confirm_delete(token)
    except KnockLockError as e:
        raise http_error(e)
    return ActionResponse(success=True, message=f"Deleted {pending.recordId}")

@router.delete("/confirmations/{token}", response_model=ActionResponse)
async def cancel_delete(token: str, controller: LockController = Depends(get_controller)):
    try:
        controller.entities.cancel_delete(token)
    except KnockLockError as e:
        raise http_error(e)
    return ActionResponse(success=True, message="Delete cancelled")
