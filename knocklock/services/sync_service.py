# =======================================================================================
# knocklock/services/sync_service.py - Collection Synchronization Service
# =======================================================================================
import logging
from functools import partial
from typing import Any, Callable, Dict, Optional, Set, Tuple, Type
from pydantic import BaseModel, ValidationError as SchemaError
from ..models.enums import Collection, collection_path
from ..models.schemas import AccessKey, KnockPattern, AccessLogEntry
from ..utils.exceptions import PrincipalNotResolvedError
from .store_client import RemoteStore, Snapshot

logger = logging.getLogger(__name__)

_RECORD_MODELS = {
    Collection.RFID_TAGS: AccessKey,
    Collection.KNOCK_PATTERNS: KnockPattern,
    Collection.ACCESS_LOGS: AccessLogEntry,
}


class CollectionSynchronizer:
    """
    Keeps local mirrors of the principal's keys, patterns and access log.

    Each push from the store replaces the whole mirror; nothing is patched
    locally. Mirrors are tuples and only this class reassigns them.
    """

    MIRRORED = (Collection.RFID_TAGS, Collection.KNOCK_PATTERNS, Collection.ACCESS_LOGS)

    def __init__(self, store: RemoteStore):
        self.store = store
        self.principal: Optional[str] = None
        self._mirrors: Dict[Collection, Tuple] = {c: () for c in self.MIRRORED}
        self._stale: Dict[Collection, bool] = {c: False for c in self.MIRRORED}
        self._unsubscribers: Dict[Collection, Callable[[], None]] = {}
        # collections whose pushes are accepted; set before subscribing since
        # a store may deliver the first snapshot from inside subscribe()
        self._live: Set[Collection] = set()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def keys(self) -> Tuple[AccessKey, ...]:
        return self._mirrors[Collection.RFID_TAGS]

    @property
    def patterns(self) -> Tuple[KnockPattern, ...]:
        return self._mirrors[Collection.KNOCK_PATTERNS]

    @property
    def logs(self) -> Tuple[AccessLogEntry, ...]:
        return self._mirrors[Collection.ACCESS_LOGS]

    @property
    def active(self) -> bool:
        return bool(self._live)

    def mirror(self, collection: Collection) -> Tuple:
        return self._mirrors[collection]

    def is_stale(self, collection: Collection) -> bool:
        return self._stale[collection]

    def stale_flags(self) -> Dict[str, bool]:
        return {c.value: stale for c, stale in self._stale.items()}

    def path_for(self, collection: Collection) -> str:
        """Store path of a collection under the active principal."""
        if not self.principal:
            raise PrincipalNotResolvedError("Device owner is not resolved yet")
        return collection_path(self.principal, collection)

    # ------------------------------------------------------------------
    # Subscription lifecycle
    # ------------------------------------------------------------------
    def start(self, principal: Optional[str]) -> None:
        """
        Subscribe all mirrors for the principal.

        Calling it again for the active principal only resubscribes the
        mirrors whose subscription failed.
        """
        if not principal:
            logger.warning("No principal resolved; mirrors not subscribed")
            return
        if principal != self.principal and (self.active or self.principal):
            self.stop()

        self.principal = principal
        missing = [c for c in self.MIRRORED if c not in self._live]
        for collection in missing:
            self._stale[collection] = False
            self._live.add(collection)
            self._unsubscribers[collection] = self.store.subscribe(
                collection_path(principal, collection),
                partial(self._on_snapshot, collection),
                partial(self._on_error, collection),
            )
        if missing:
            logger.info("Subscribed %s for principal %s", ", ".join(c.value for c in missing), principal)

    def stop(self) -> None:
        """Unsubscribe all mirrors and forget the principal."""
        unsubscribers = self._unsubscribers
        self._unsubscribers = {}
        self._live.clear()
        for unsubscribe in unsubscribers.values():
            unsubscribe()

        for collection in self.MIRRORED:
            self._mirrors[collection] = ()
            self._stale[collection] = False
        if self.principal:
            logger.info("Mirrors unsubscribed for principal %s", self.principal)
        self.principal = None

    # ------------------------------------------------------------------
    # Store callbacks
    # ------------------------------------------------------------------
    def _on_snapshot(self, collection: Collection, snapshot: Snapshot) -> None:
        if collection not in self._live:
            # late delivery after stop() or a subscription error
            return

        model = _RECORD_MODELS[collection]
        records = [_to_record(model, collection, record_id, data) for record_id, data in snapshot.items()]

        if collection is Collection.ACCESS_LOGS:
            # newest first; unknown timestamps count as epoch 0
            records.sort(key=lambda entry: entry.timestamp or 0, reverse=True)

        self._mirrors[collection] = tuple(records)
        logger.debug("%s mirror replaced (%d records)", collection.value, len(records))

    def _on_error(self, collection: Collection, error: Exception) -> None:
        logger.error("%s subscription error: %s", collection.value, error)
        # the store has ended this subscription; the mirror keeps its last
        # contents until start() resubscribes it
        self._stale[collection] = True
        self._live.discard(collection)
        self._unsubscribers.pop(collection, None)


def _to_record(model: Type[BaseModel], collection: Collection, record_id: str, data: Any) -> BaseModel:
    """
    Build a mirror record from a pushed document. Every pushed record is
    kept: fields that do not fit the model fall back to their defaults.
    """
    fields = dict(data) if isinstance(data, dict) else {}
    fields.pop("id", None)
    try:
        return model.model_validate({**fields, "id": record_id})
    except SchemaError as e:
        bad = {err["loc"][0] for err in e.errors() if err["loc"]}
        logger.warning("%s record %s has invalid %s; using defaults",
                       collection.value, record_id, ", ".join(sorted(map(str, bad))))
        kept = {k: v for k, v in fields.items() if k not in bad}
        return model.model_validate({**kept, "id": record_id})
