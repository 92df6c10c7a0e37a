# =======================================================================================
# knocklock/services/pattern_recorder.py - Knock Pattern Enrollment
# =======================================================================================
import logging
from typing import List, Optional
from ..config import config
from ..models.enums import Collection, SinkAction
from ..models.schemas import RecordingState, SavePatternResponse
from ..utils.clock import Clock, now_ms
from ..utils.exceptions import PatternLimitError, StoreError, ValidationError
from ..utils.validators import derive_intervals, require_text
from .audit_sink import AuditSink
from .store_client import RemoteStore
from .sync_service import CollectionSynchronizer

logger = logging.getLogger(__name__)


class PatternRecorder:
    """
    Records one knock pattern at a time.

    Taps are wall-clock timestamps (ms). Callers feeding both pointer and
    touch events must forward only one of them per physical tap.
    """

    def __init__(self, store: RemoteStore, synchronizer: CollectionSynchronizer,
                 sink: AuditSink, clock: Clock = now_ms,
                 max_patterns: Optional[int] = None):
        self.store = store
        self.synchronizer = synchronizer
        self.sink = sink
        self.clock = clock
        self.max_patterns = config.MAX_KNOCK_PATTERNS if max_patterns is None else max_patterns
        self.recording = False
        self.taps: List[int] = []

    @property
    def limit_reached(self) -> bool:
        return len(self.synchronizer.patterns) >= self.max_patterns

    def _check_limit(self) -> None:
        if self.limit_reached:
            raise PatternLimitError(f"Max {self.max_patterns} patterns reached.")

    def start_recording(self) -> None:
        self._check_limit()
        self.taps = []
        self.recording = True

    def record_tap(self, timestamp_ms: Optional[int] = None) -> int:
        """Append a tap while recording. Returns the number of taps so far."""
        if not self.recording:
            return len(self.taps)

        ts = self.clock() if timestamp_ms is None else timestamp_ms
        if self.taps and ts < self.taps[-1]:
            raise ValidationError("Tap is earlier than the previous tap")
        self.taps.append(ts)
        return len(self.taps)

    def cancel(self) -> None:
        self.recording = False
        self.taps = []

    async def stop_and_save(self, name: Optional[str]) -> SavePatternResponse:
        """
        Stop recording and persist the pattern.

        Validation failures (too few taps, missing name, cap reached) raise
        before any write. On success exactly one record is pushed and one
        add_pattern event goes to the audit sink.
        """
        self.recording = False
        intervals = derive_intervals(self.taps)
        try:
            name = require_text(name, "Pattern name")
        except ValidationError:
            raise ValidationError("Please name this pattern first.") from None
        # a pattern may have arrived from elsewhere since start_recording()
        self._check_limit()

        path = self.synchronizer.path_for(Collection.KNOCK_PATTERNS)
        try:
            record_id = await self.store.push(path, {
                "name": name,
                "intervals": intervals,
                "blocked": False,
                "createdAt": self.clock(),
            })
        except StoreError as e:
            logger.error("Saving knock pattern %r failed: %s", name, e)
            raise

        self.sink.send({"action": SinkAction.ADD_PATTERN.value, "name": name, "intervals": intervals})
        self.taps = []
        logger.info("Knock pattern %r saved (%d taps)", name, len(intervals) + 1)
        return SavePatternResponse(id=record_id, name=name, intervals=intervals)

    def state(self) -> RecordingState:
        return RecordingState(recording=self.recording, tapCount=len(self.taps), taps=list(self.taps))
