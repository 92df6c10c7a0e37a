# =======================================================================================
# knocklock/services/audit_sink.py - External Audit Sink (spreadsheet webhook)
# =======================================================================================
import asyncio
import logging
from typing import Any, Dict, Optional, Set
import requests

logger = logging.getLogger(__name__)


class AuditSink:
    """
    Best-effort mirror of audit events to an HTTP endpoint.

    send() never blocks and never raises: the POST runs in the background,
    the response is never read, and failures are only logged.
    """

    def __init__(self, url: Optional[str], timeout: float = 5.0,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self._pending: Set[asyncio.Task] = set()

    def send(self, payload: Dict[str, Any]) -> None:
        if not self.url:
            logger.debug("Audit sink not configured; dropping %s", payload.get("action"))
            return

        task = asyncio.get_running_loop().create_task(self._post(payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _post(self, payload: Dict[str, Any]) -> None:
        try:
            await asyncio.to_thread(
                self.session.post, self.url, json=payload, timeout=self.timeout
            )
            logger.info("Sent to sink: %s", payload.get("action"))
        except requests.RequestException as e:
            logger.error("Sink sync error (%s): %s", payload.get("action"), e)

    async def drain(self) -> None:
        """Wait for in-flight posts to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        await self.drain()
        self.session.close()
