import asyncio
import copy
import itertools
from collections import defaultdict
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest

from knocklock.controller import LockController
from knocklock.models.enums import Collection, collection_path
from knocklock.utils.exceptions import StoreError, RecordNotFoundError

PRINCIPAL = "owner-1"
DAY_MS = 24 * 60 * 60 * 1000
NOW_MS = 1_700_000_000_000


def path(collection: Collection, principal: str = PRINCIPAL) -> str:
    return collection_path(principal, collection)


class FakeClock:
    def __init__(self, now: int = NOW_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeStore:
    """
    In-memory RemoteStore.

    With auto_push the subscribers of a path receive the full collection
    right after every write, like the real store echoing a change. Faults:
    `fail_on` holds (operation, collection) pairs, `fail_ids` record ids
    whose remove/update fails.
    """

    def __init__(self, auto_push: bool = True):
        self.auto_push = auto_push
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.subscribers: Dict[str, List[Tuple]] = defaultdict(list)
        self.fail_on: Set[Tuple[str, Collection]] = set()
        self.fail_ids: Set[str] = set()
        self.calls: List[Tuple[str, str, str]] = []
        self.gate: Optional[asyncio.Event] = None
        self.opened = False
        self._ids = itertools.count(1)

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.opened = False
        self.subscribers.clear()

    async def ping(self) -> None:
        if not self.opened:
            raise StoreError("store closed")

    def _check(self, op: str, store_path: str, record_id: Optional[str] = None) -> None:
        for fail_op, collection in self.fail_on:
            if fail_op == op and store_path.endswith("/" + collection.value):
                raise StoreError(f"injected {op} failure on {store_path}")
        if record_id is not None and record_id in self.fail_ids:
            raise StoreError(f"injected {op} failure on {record_id}")

    async def push(self, store_path: str, data: Dict[str, Any]) -> str:
        if self.gate is not None:
            await self.gate.wait()
        self._check("push", store_path)
        record_id = f"rec{next(self._ids)}"
        self.collections.setdefault(store_path, {})[record_id] = copy.deepcopy(data)
        self.calls.append(("push", store_path, record_id))
        if self.auto_push:
            self.emit(store_path)
        return record_id

    async def update(self, store_path: str, record_id: str, fields: Dict[str, Any]) -> None:
        self._check("update", store_path, record_id)
        records = self.collections.get(store_path, {})
        if record_id not in records:
            raise RecordNotFoundError(record_id)
        records[record_id].update(copy.deepcopy(fields))
        self.calls.append(("update", store_path, record_id))
        if self.auto_push:
            self.emit(store_path)

    async def remove(self, store_path: str, record_id: str) -> None:
        self._check("remove", store_path, record_id)
        self.collections.get(store_path, {}).pop(record_id, None)
        self.calls.append(("remove", store_path, record_id))
        if self.auto_push:
            self.emit(store_path)

    def subscribe(self, store_path, on_snapshot, on_error):
        entry = (on_snapshot, on_error)
        self.subscribers[store_path].append(entry)
        on_snapshot(copy.deepcopy(self.collections.get(store_path, {})))

        def unsubscribe():
            if entry in self.subscribers[store_path]:
                self.subscribers[store_path].remove(entry)

        return unsubscribe

    # ---- test helpers ----
    def seed(self, store_path: str, record_id: str, data: Dict[str, Any]) -> None:
        """Write directly, as the lock hardware would, without notifying."""
        self.collections.setdefault(store_path, {})[record_id] = copy.deepcopy(data)

    def emit(self, store_path: str) -> None:
        for on_snapshot, _ in list(self.subscribers[store_path]):
            on_snapshot(copy.deepcopy(self.collections.get(store_path, {})))

    def break_subscription(self, store_path: str, error: Exception) -> None:
        for _, on_error in list(self.subscribers[store_path]):
            on_error(error)
        self.subscribers[store_path].clear()

    def records(self, collection: Collection) -> Dict[str, Dict[str, Any]]:
        return self.collections.get(path(collection), {})

    def count(self, op: str, collection: Collection) -> int:
        return sum(1 for o, p, _ in self.calls if o == op and p == path(collection))


class RecordingSink:
    def __init__(self):
        self.sent: List[Dict[str, Any]] = []

    def send(self, payload: Dict[str, Any]) -> None:
        self.sent.append(payload)

    async def aclose(self) -> None:
        pass


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def controller(store, sink, clock):
    """Controller wired to fakes, subscribed for PRINCIPAL, worker disabled."""
    ctl = LockController(store, sink, clock=clock, retention_interval=0,
                         unlock_hold_seconds=-1, confirmation_ttl=60)
    ctl.synchronizer.start(PRINCIPAL)
    return ctl
