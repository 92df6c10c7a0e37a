# =======================================================================================
# knocklock/controller.py - Lock Controller (composition root)
# =======================================================================================
import logging
from typing import Optional
from .config import config
from .database import DatabaseManager
from .models.schemas import StatusResponse
from .services.audit_sink import AuditSink
from .services.command_service import CommandService
from .services.entity_service import EntityService
from .services.pattern_recorder import PatternRecorder
from .services.retention_service import RetentionPruner
from .services.store_client import RemoteStore, SqlStore
from .services.sync_service import CollectionSynchronizer
from .utils.clock import Clock, now_ms
from .workers.retention_worker import RetentionWorker

logger = logging.getLogger(__name__)


class LockController:
    """Owns the store client and every component that uses it."""

    def __init__(self, store: RemoteStore, sink: AuditSink, clock: Clock = now_ms, *,
                 max_patterns: Optional[int] = None,
                 retention_days: Optional[int] = None,
                 retention_interval: Optional[float] = None,
                 retention_initial_delay: Optional[float] = None,
                 unlock_hold_seconds: Optional[float] = None,
                 confirmation_ttl: Optional[float] = None):
        self.store = store
        self.sink = sink
        self.synchronizer = CollectionSynchronizer(store)
        self.commands = CommandService(store, self.synchronizer, sink, clock=clock,
                                       hold_seconds=unlock_hold_seconds)
        self.entities = EntityService(store, self.synchronizer, sink, clock=clock,
                                      confirmation_ttl=confirmation_ttl)
        self.recorder = PatternRecorder(store, self.synchronizer, sink, clock=clock,
                                        max_patterns=max_patterns)
        self.pruner = RetentionPruner(store, self.synchronizer, clock=clock,
                                      retention_days=retention_days)
        self.retention_worker = RetentionWorker(self.pruner, interval=retention_interval,
                                                initial_delay=retention_initial_delay)
        self.is_open = False

    @classmethod
    def from_config(cls) -> "LockController":
        store = SqlStore(DatabaseManager(config.DB_URL), poll_interval=config.STORE_POLL_INTERVAL)
        sink = AuditSink(config.AUDIT_SINK_URL, timeout=config.AUDIT_SINK_TIMEOUT)
        return cls(store, sink)

    @property
    def principal(self) -> Optional[str]:
        return self.synchronizer.principal

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def open(self, principal: Optional[str] = None) -> None:
        await self.store.open()
        self.is_open = True
        self.set_principal(principal)
        self.retention_worker.start()

    def set_principal(self, principal: Optional[str]) -> None:
        """Resolve (or clear) the device owner; mirrors follow it."""
        if principal and principal == self.synchronizer.principal:
            # same owner: only mirrors whose subscription failed are resubscribed
            self.synchronizer.start(principal)
            return
        # anything in progress belonged to the previous owner
        self.recorder.cancel()
        self.entities.clear_pending()
        self.commands.reset()
        if principal:
            self.synchronizer.start(principal)
        elif self.synchronizer.principal:
            self.synchronizer.stop()
            logger.warning("Principal cleared; mirrors torn down")
        else:
            logger.warning("No PRINCIPAL_ID configured; store writes are disabled")

    async def close(self) -> None:
        await self.retention_worker.stop()
        self.synchronizer.stop()
        self.commands.reset()
        await self.sink.aclose()
        await self.store.close()
        self.is_open = False

    def status(self) -> StatusResponse:
        return StatusResponse(
            status=self.commands.status,
            principal=self.principal,
            keys=len(self.synchronizer.keys),
            patterns=len(self.synchronizer.patterns),
            logs=len(self.synchronizer.logs),
            stale=self.synchronizer.stale_flags(),
        )
