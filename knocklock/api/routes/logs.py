# =======================================================================================
# knocklock/api/routes/logs.py - Access Log Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends
from ...controller import LockController
from ...models.enums import Collection
from ...models.schemas import LogsResponse, PruneResponse
from ..dependencies import get_controller

router = APIRouter()


@router.get("/logs", response_model=LogsResponse)
async def get_logs(controller: LockController = Depends(get_controller)):
    """Access log, newest first. Retention runs in the background worker."""
    sync = controller.synchronizer
    return LogsResponse(
        logs=list(sync.logs),
        stale=sync.is_stale(Collection.ACCESS_LOGS),
        retentionDays=controller.pruner.retention_days,
    )


@router.post("/logs/prune", response_model=PruneResponse)
async def prune_logs(controller: LockController = Depends(get_controller)):
    deleted = await controller.pruner.prune_old_logs()
    return PruneResponse(deleted=deleted)
