# =======================================================================================
# knocklock/services/store_client.py - Remote Store Client
# =======================================================================================
import asyncio
import logging
import uuid
from typing import Any, Callable, Dict, Optional, Protocol, Set
from sqlalchemy.exc import SQLAlchemyError
from ..config import config
from ..database import DatabaseManager
from ..utils.exceptions import StoreError, RecordNotFoundError

logger = logging.getLogger(__name__)

Snapshot = Dict[str, Dict[str, Any]]
SnapshotCallback = Callable[[Snapshot], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


class RemoteStore(Protocol):
    """
    Document store shared with the lock hardware.

    subscribe() delivers the full contents of a collection path on every
    change, starting with the current contents, until the returned
    function is called or on_error fires.
    """

    async def open(self) -> None: ...

    async def close(self) -> None: ...

    async def ping(self) -> None: ...

    async def push(self, path: str, data: Dict[str, Any]) -> str: ...

    async def update(self, path: str, record_id: str, fields: Dict[str, Any]) -> None: ...

    async def remove(self, path: str, record_id: str) -> None: ...

    def subscribe(self, path: str, on_snapshot: SnapshotCallback,
                  on_error: ErrorCallback) -> Unsubscribe: ...


class _Subscription:
    def __init__(self, path: str, on_snapshot: SnapshotCallback, on_error: ErrorCallback):
        self.path = path
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.wake = asyncio.Event()
        self.last: Optional[Snapshot] = None
        self.task: Optional[asyncio.Task] = None


class SqlStore:
    """RemoteStore backed by a SQL documents table; subscriptions poll."""

    def __init__(self, db: DatabaseManager, poll_interval: Optional[float] = None):
        self.db = db
        self.poll_interval = poll_interval if poll_interval is not None else config.STORE_POLL_INTERVAL
        self._subscriptions: Set[_Subscription] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def open(self) -> None:
        await self._run(self.db.open)

    async def close(self) -> None:
        subscriptions = list(self._subscriptions)
        self._subscriptions.clear()
        for sub in subscriptions:
            if sub.task:
                sub.task.cancel()
        await asyncio.gather(*(s.task for s in subscriptions if s.task), return_exceptions=True)
        self.db.close()

    async def ping(self) -> None:
        await self._run(self.db.ping)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def push(self, path: str, data: Dict[str, Any]) -> str:
        record_id = uuid.uuid4().hex
        await self._run(self.db.insert_document, path, record_id, data)
        self._notify(path)
        return record_id

    async def update(self, path: str, record_id: str, fields: Dict[str, Any]) -> None:
        found = await self._run(self.db.merge_document, path, record_id, fields)
        if not found:
            raise RecordNotFoundError(f"{path}/{record_id} does not exist")
        self._notify(path)

    async def remove(self, path: str, record_id: str) -> None:
        # removing a missing record is not an error
        await self._run(self.db.delete_document, path, record_id)
        self._notify(path)

    async def _run(self, fn: Callable, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except (SQLAlchemyError, RuntimeError) as e:
            raise StoreError(str(e)) from e

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def subscribe(self, path: str, on_snapshot: SnapshotCallback,
                  on_error: ErrorCallback) -> Unsubscribe:
        sub = _Subscription(path, on_snapshot, on_error)
        sub.task = asyncio.get_running_loop().create_task(self._watch(sub))
        self._subscriptions.add(sub)

        def unsubscribe() -> None:
            self._subscriptions.discard(sub)
            if sub.task and not sub.task.done():
                sub.task.cancel()

        return unsubscribe

    def _notify(self, path: str) -> None:
        """Wake subscribers of a path right after a write from this client."""
        for sub in self._subscriptions:
            if sub.path == path:
                sub.wake.set()

    async def _watch(self, sub: _Subscription) -> None:
        while True:
            sub.wake.clear()
            try:
                snapshot = await self._run(self.db.fetch_collection, sub.path)
            except StoreError as e:
                logger.error("Subscription to %s failed: %s", sub.path, e)
                self._subscriptions.discard(sub)
                sub.on_error(e)
                return

            if snapshot != sub.last:
                sub.last = snapshot
                sub.on_snapshot(snapshot)

            try:
                await asyncio.wait_for(sub.wake.wait(), timeout=self.poll_interval)
            except asyncio.TimeoutError:
                pass
