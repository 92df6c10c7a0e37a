# =======================================================================================
# knocklock/services/command_service.py - Remote Unlock Command & Audit
# =======================================================================================
import asyncio
import logging
from typing import Optional
from ..config import config
from ..models.enums import Collection, LockStatus, SinkAction, COMMAND_SOURCE, REMOTE_UNLOCK_DETAIL
from ..models.schemas import UnlockResponse
from ..utils.clock import Clock, now_ms
from ..utils.exceptions import StoreError, UnlockInProgressError
from .audit_sink import AuditSink
from .store_client import RemoteStore
from .sync_service import CollectionSynchronizer

logger = logging.getLogger(__name__)


class CommandService:
    """Issues device commands and records them in the access log."""

    def __init__(self, store: RemoteStore, synchronizer: CollectionSynchronizer,
                 sink: AuditSink, clock: Clock = now_ms,
                 hold_seconds: Optional[float] = None):
        self.store = store
        self.synchronizer = synchronizer
        self.sink = sink
        self.clock = clock
        # how long UNLOCKED is shown before falling back to LOCKED; None keeps it
        self.hold_seconds = config.UNLOCK_HOLD_SECONDS if hold_seconds is None else hold_seconds
        self.status = LockStatus.LOCKED
        self._relock: Optional[asyncio.TimerHandle] = None

    async def issue_unlock(self) -> UnlockResponse:
        """
        Send an UNLOCK command, then log it, then mirror it to the sink.

        The two store writes are independent: if the log write fails after
        the command went out, the device may still open but the caller sees
        FAIL and the status becomes ERROR. Nothing is rolled back.
        """
        if self.status is LockStatus.UNLOCKING:
            raise UnlockInProgressError("Unlock already in progress")

        commands_path = self.synchronizer.path_for(Collection.COMMANDS)
        logs_path = self.synchronizer.path_for(Collection.ACCESS_LOGS)

        self._cancel_relock()
        self.status = LockStatus.UNLOCKING

        try:
            await self.store.push(commands_path, {
                "type": "UNLOCK",
                "timestamp": self.clock(),
                "source": COMMAND_SOURCE,
            })
            await self.store.push(logs_path, {
                "type": "UNLOCK",
                "detail": REMOTE_UNLOCK_DETAIL,
                "timestamp": self.clock(),
            })
        except StoreError as e:
            logger.error("Unlock failed: %s", e)
            self.status = LockStatus.ERROR
            return UnlockResponse(result="FAIL", status=self.status, message=f"Unlock failed: {e}")

        self.sink.send({
            "action": SinkAction.LOG.value,
            "type": "UNLOCK",
            "detail": REMOTE_UNLOCK_DETAIL,
            "source": COMMAND_SOURCE,
        })

        self.status = LockStatus.UNLOCKED
        self._schedule_relock()
        logger.info("Remote unlock sent")
        return UnlockResponse(result="PASS", status=self.status, message="Unlock command sent")

    # ------------------------------------------------------------------
    # Relock timer
    # ------------------------------------------------------------------
    def _schedule_relock(self) -> None:
        if self.hold_seconds is None or self.hold_seconds < 0:
            return
        loop = asyncio.get_running_loop()
        self._relock = loop.call_later(self.hold_seconds, self._expire_unlocked)

    def _expire_unlocked(self) -> None:
        self._relock = None
        if self.status is LockStatus.UNLOCKED:
            self.status = LockStatus.LOCKED

    def _cancel_relock(self) -> None:
        if self._relock is not None:
            self._relock.cancel()
            self._relock = None

    def reset(self) -> None:
        """Drop any pending relock and return to LOCKED."""
        self._cancel_relock()
        self.status = LockStatus.LOCKED
