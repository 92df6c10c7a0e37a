# =======================================================================================
# knocklock/services/retention_service.py - Access Log Retention
# =======================================================================================
import logging
from typing import List, Optional, Set
from ..config import config
from ..models.enums import Collection
from ..models.schemas import AccessLogEntry
from ..utils.clock import Clock, now_ms
from ..utils.exceptions import StoreError
from .store_client import RemoteStore
from .sync_service import CollectionSynchronizer

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000


class RetentionPruner:
    """Deletes mirrored access log entries older than the retention window."""

    def __init__(self, store: RemoteStore, synchronizer: CollectionSynchronizer,
                 clock: Clock = now_ms, retention_days: Optional[int] = None):
        self.store = store
        self.synchronizer = synchronizer
        self.clock = clock
        self.retention_days = config.LOG_RETENTION_DAYS if retention_days is None else retention_days
        self._deleted: Set[str] = set()
        self._running = False

    def cutoff(self) -> int:
        return self.clock() - self.retention_days * DAY_MS

    def expired_entries(self) -> List[AccessLogEntry]:
        """Entries with a known timestamp strictly before the cutoff."""
        cutoff = self.cutoff()
        return [e for e in self.synchronizer.logs if e.timestamp is not None and e.timestamp < cutoff]

    async def prune_old_logs(self) -> int:
        """
        Delete expired entries one at a time. Returns how many were deleted.

        A failed delete is logged and skipped. Entries already deleted by an
        earlier run but still present in the mirror are not deleted again.
        """
        if self._running:
            logger.debug("Prune already running; skipped")
            return 0
        if not self.synchronizer.principal or not self.synchronizer.logs:
            return 0

        self._running = True
        try:
            path = self.synchronizer.path_for(Collection.ACCESS_LOGS)
            # forget ids the store has stopped echoing
            self._deleted &= {e.id for e in self.synchronizer.logs}

            deleted = 0
            for entry in self.expired_entries():
                if entry.id in self._deleted:
                    continue
                try:
                    await self.store.remove(path, entry.id)
                except StoreError as e:
                    logger.error("Failed to prune log %s: %s", entry.id, e)
                    continue
                self._deleted.add(entry.id)
                deleted += 1

            if deleted:
                logger.info("Pruned %d old logs.", deleted)
            return deleted
        finally:
            self._running = False
