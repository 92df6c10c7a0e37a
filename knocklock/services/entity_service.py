# =======================================================================================
# knocklock/services/entity_service.py - Key & Pattern Management Service
# =======================================================================================
import logging
import secrets
from typing import Callable, Dict, Optional, Tuple, Union
from ..config import config
from ..models.enums import Collection, SinkAction, DELETE_PROMPTS
from ..models.schemas import AccessKey, KnockPattern, ConfirmationToken
from ..utils.clock import Clock, now_ms
from ..utils.exceptions import ConfirmationError, RecordNotFoundError, StoreError, ValidationError
from ..utils.validators import require_text
from .audit_sink import AuditSink
from .store_client import RemoteStore
from .sync_service import CollectionSynchronizer

logger = logging.getLogger(__name__)

Entity = Union[AccessKey, KnockPattern]

MANAGED = (Collection.RFID_TAGS, Collection.KNOCK_PATTERNS)


class EntityService:
    """Enrollment, block toggling and confirmed deletion of keys and patterns."""

    def __init__(self, store: RemoteStore, synchronizer: CollectionSynchronizer,
                 sink: AuditSink, clock: Clock = now_ms,
                 confirmation_ttl: Optional[float] = None,
                 token_factory: Callable[[], str] = lambda: secrets.token_urlsafe(16)):
        self.store = store
        self.synchronizer = synchronizer
        self.sink = sink
        self.clock = clock
        ttl = config.CONFIRMATION_TTL if confirmation_ttl is None else confirmation_ttl
        self.confirmation_ttl_ms = int(ttl * 1000)
        self.token_factory = token_factory
        # token -> (pending confirmation, store path at request time)
        self._pending: Dict[str, Tuple[ConfirmationToken, str]] = {}

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------
    async def enroll_key(self, uid: Optional[str], name: Optional[str]) -> str:
        """Register a new RFID key. Returns the store-assigned id."""
        uid = require_text(uid, "Card UID")
        name = require_text(name, "Owner name")
        path = self.synchronizer.path_for(Collection.RFID_TAGS)

        try:
            record_id = await self.store.push(path, {
                "uid": uid,
                "name": name,
                "blocked": False,
                "addedAt": self.clock(),
            })
        except StoreError as e:
            logger.error("Key enrollment failed for %s: %s", uid, e)
            raise

        self.sink.send({"action": SinkAction.ADD_TAG.value, "uid": uid, "name": name})
        logger.info("Key %s enrolled for %s", uid, name)
        return record_id

    # ------------------------------------------------------------------
    # Block toggle
    # ------------------------------------------------------------------
    def find(self, collection: Collection, record_id: str) -> Entity:
        """Look up a key or pattern in its local mirror."""
        self._check_managed(collection)
        for entity in self.synchronizer.mirror(collection):
            if entity.id == record_id:
                return entity
        raise RecordNotFoundError(f"No {collection.value} record {record_id}")

    async def toggle_blocked(self, collection: Collection, entity: Entity) -> bool:
        """Flip `blocked` with a single field update. Returns the new value."""
        self._check_managed(collection)
        path = self.synchronizer.path_for(collection)
        blocked = not entity.blocked
        try:
            await self.store.update(path, entity.id, {"blocked": blocked})
        except StoreError as e:
            logger.error("Toggle failed for %s/%s: %s", collection.value, entity.id, e)
            raise
        return blocked

    # ------------------------------------------------------------------
    # Two-phase delete
    # ------------------------------------------------------------------
    def request_delete(self, collection: Collection, record_id: str) -> ConfirmationToken:
        """First phase: nothing is removed until confirm_delete() gets the token."""
        self.find(collection, record_id)
        path = self.synchronizer.path_for(collection)
        self._purge_expired()

        pending = ConfirmationToken(
            token=self.token_factory(),
            collection=collection,
            recordId=record_id,
            prompt=DELETE_PROMPTS[collection],
            expiresAt=self.clock() + self.confirmation_ttl_ms,
        )
        self._pending[pending.token] = (pending, path)
        return pending

    async def confirm_delete(self, token: str) -> ConfirmationToken:
        """Second phase: perform the single delete. Tokens are single use."""
        entry = self._pending.pop(token, None)
        if entry is None:
            raise ConfirmationError("Unknown or already used confirmation")
        pending, path = entry
        if pending.expiresAt <= self.clock():
            raise ConfirmationError("Confirmation expired")

        try:
            await self.store.remove(path, pending.recordId)
        except StoreError as e:
            logger.error("Delete failed for %s/%s: %s", pending.collection.value, pending.recordId, e)
            raise
        logger.info("Deleted %s/%s", pending.collection.value, pending.recordId)
        return pending

    def cancel_delete(self, token: str) -> None:
        if self._pending.pop(token, None) is None:
            raise ConfirmationError("Unknown or already used confirmation")

    def clear_pending(self) -> None:
        self._pending.clear()

    def _purge_expired(self) -> None:
        now = self.clock()
        for token in [t for t, (p, _) in self._pending.items() if p.expiresAt <= now]:
            del self._pending[token]

    @staticmethod
    def _check_managed(collection: Collection) -> None:
        if collection not in MANAGED:
            raise ValidationError(f"{collection.value} records cannot be managed")
