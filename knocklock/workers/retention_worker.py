# =======================================================================================
# knocklock/workers/retention_worker.py - Background Retention Worker
# =======================================================================================
import asyncio
import logging
from typing import Optional
from ..config import config
from ..services.retention_service import RetentionPruner

logger = logging.getLogger(__name__)


class RetentionWorker:
    """Runs the access log retention sweep on a timer."""

    def __init__(self, pruner: RetentionPruner, interval: Optional[float] = None,
                 initial_delay: Optional[float] = None):
        self.pruner = pruner
        self.interval = config.RETENTION_SWEEP_INTERVAL if interval is None else interval
        self.initial_delay = config.RETENTION_INITIAL_DELAY if initial_delay is None else initial_delay
        self.running = False
        self._task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Start / Stop
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Start the sweep loop on the running event loop."""
        if not self._should_start():
            return

        self.running = True
        self._task = asyncio.get_running_loop().create_task(self._run_loop())
        logger.info("Retention worker started (every %ss)", self.interval)

    async def stop(self) -> None:
        self.running = False
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------
    def _should_start(self) -> bool:
        if self.running:
            return False
        if self.interval <= 0:
            logger.info("RETENTION_SWEEP_INTERVAL <= 0; retention worker disabled")
            return False
        return True

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    async def _run_loop(self) -> None:
        await asyncio.sleep(self.initial_delay)
        while self.running:
            try:
                await self.pruner.prune_old_logs()
            except Exception:
                logger.exception("Retention sweep failed; retrying in %ss", self.interval)
            await asyncio.sleep(self.interval)
