# =======================================================================================
# knocklock/api/routes/keys.py - RFID Key Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends
from ...controller import LockController
from ...models.enums import Collection
from ...models.schemas import (
    CreateKeyRequest,
    CreateKeyResponse,
    KeysResponse,
    ActionResponse,
    ConfirmationToken,
)
from ...utils.exceptions import KnockLockError
from ..dependencies import get_controller, http_error

router = APIRouter()


@router.get("/keys", response_model=KeysResponse)
async def list_keys(controller: LockController = Depends(get_controller)):
    sync = controller.synchronizer
    return KeysResponse(keys=list(sync.keys), stale=sync.is_stale(Collection.RFID_TAGS))


@router.post("/keys", response_model=CreateKeyResponse)
async def enroll_key(request: CreateKeyRequest, controller: LockController = Depends(get_controller)):
    """Register a new RFID key; it shows up in GET /keys on the next store push."""
    try:
        key_id = await controller.entities.enroll_key(request.uid, request.name)
    except KnockLockError as e:
        raise http_error(e)
    return CreateKeyResponse(id=key_id, success=True, message="Key registered")


@router.post("/keys/{key_id}/toggle", response_model=ActionResponse)
async def toggle_key(key_id: str, controller: LockController = Depends(get_controller)):
    try:
        key = controller.entities.find(Collection.RFID_TAGS, key_id)
        blocked = await controller.entities.toggle_blocked(Collection.RFID_TAGS, key)
    except KnockLockError as e:
        raise http_error(e)
    return ActionResponse(success=True, message="Key blocked" if blocked else "Key unblocked")


# ---- two-phase delete; confirm through /confirmations/{token} ----

@router.post("/keys/{key_id}/delete", response_model=ConfirmationToken)
async def request_key_delete(key_id: str, controller: LockController = Depends(get_controller)):
    try:
        return controller.entities.request_delete(Collection.RFID_TAGS, key_id)
    except KnockLockError as e:
        raise http_error(e)
