# =======================================================================================
# knocklock/api/routes/patterns.py - Knock Pattern Endpoints
# =======================================================================================
from typing import Optional
from fastapi import APIRouter, Depends
from ...controller import LockController
from ...models.enums import Collection
from ...models.schemas import (
    PatternsResponse,
    RecordingState,
    TapRequest,
    SavePatternRequest,
    SavePatternResponse,
    ActionResponse,
    ConfirmationToken,
)
from ...utils.exceptions import KnockLockError
from ..dependencies import get_controller, http_error

router = APIRouter()


@router.get("/patterns", response_model=PatternsResponse)
async def list_patterns(controller: LockController = Depends(get_controller)):
    sync = controller.synchronizer
    recorder = controller.recorder
    return PatternsResponse(
        patterns=list(sync.patterns),
        stale=sync.is_stale(Collection.KNOCK_PATTERNS),
        maxPatterns=recorder.max_patterns,
        maxReached=recorder.limit_reached,
    )


# ---- recording session ----

@router.get("/patterns/recording", response_model=RecordingState)
async def recording_state(controller: LockController = Depends(get_controller)):
    return controller.recorder.state()


@router.post("/patterns/recording", response_model=RecordingState)
async def start_recording(controller: LockController = Depends(get_controller)):
    try:
        controller.recorder.start_recording()
    except KnockLockError as e:
        raise http_error(e)
    return controller.recorder.state()


@router.post("/patterns/recording/taps", response_model=RecordingState)
async def record_tap(request: Optional[TapRequest] = None, controller: LockController = Depends(get_controller)):
    """
    Register one tap. Send the client's own tap time when network jitter
    matters; without it the server clock is used.
    """
    try:
        controller.recorder.record_tap(request.timestamp if request else None)
    except KnockLockError as e:
        raise http_error(e)
    return controller.recorder.state()


@router.post("/patterns/recording/save", response_model=SavePatternResponse)
async def save_pattern(request: SavePatternRequest, controller: LockController = Depends(get_controller)):
    try:
        return await controller.recorder.stop_and_save(request.name)
    except KnockLockError as e:
        raise http_error(e)


@router.delete("/patterns/recording", response_model=RecordingState)
async def cancel_recording(controller: LockController = Depends(get_controller)):
    controller.recorder.cancel()
    return controller.recorder.state()


# ---- enrolled patterns ----

@router.post("/patterns/{pattern_id}/toggle", response_model=ActionResponse)
async def toggle_pattern(pattern_id: str, controller: LockController = Depends(get_controller)):
    try:
        pattern = controller.entities.find(Collection.KNOCK_PATTERNS, pattern_id)
        blocked = await controller.entities.toggle_blocked(Collection.KNOCK_PATTERNS, pattern)
    except KnockLockError as e:
        raise http_error(e)
    return ActionResponse(success=True, message="Pattern blocked" if blocked else "Pattern enabled")


@router.post("/patterns/{pattern_id}/delete", response_model=ConfirmationToken)
async def request_pattern_delete(pattern_id: str, controller: LockController = Depends(get_controller)):
    try:
        return controller.entities.request_delete(Collection.KNOCK_PATTERNS, pattern_id)
    except KnockLockError as e:
        raise http_error(e)
