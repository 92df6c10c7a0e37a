# =======================================================================================
# knocklock/models/schemas.py - Pydantic Models
# =======================================================================================
from typing import Optional, List, Dict
from pydantic import BaseModel, Field, computed_field
from .enums import ResultType, Collection, LockStatus

# ========== Mirrored records ==========
class AccessKey(BaseModel):
    """Enrolled RFID tag."""
    id: str = Field(..., description="Store-assigned record id")
    uid: str = Field("", description="Printed/scanned card identifier")
    name: str = Field("", description="Display label of the key holder")
    blocked: bool = Field(False, description="Sole authorization gate")
    addedAt: Optional[int] = Field(None, description="Enrollment time, epoch ms")

class KnockPattern(BaseModel):
    """Enrolled knock pattern, stored as gaps between taps."""
    id: str
    name: str = ""
    intervals: List[int] = Field(default_factory=list, description="ms between consecutive taps")
    blocked: bool = False
    createdAt: Optional[int] = None

    @computed_field
    @property
    def tapCount(self) -> int:
        return len(self.intervals) + 1 if self.intervals else 0

class AccessLogEntry(BaseModel):
    """Immutable audit entry."""
    id: str
    type: str = Field("", description="UNLOCK, RFID_ACCESS, KNOCK_ACCESS, DENIED, SYSTEM or a device-defined type")
    detail: str = ""
    timestamp: Optional[int] = Field(None, description="epoch ms; null means unknown age")

# ========== Base Func + Logic ==========
class UnlockResponse(BaseModel):
    result: ResultType
    status: LockStatus
    message: str

class ConfirmationToken(BaseModel):
    """Pending delete; nothing is removed until the token is confirmed."""
    token: str
    collection: Collection
    recordId: str
    prompt: str
    expiresAt: int

class ActionResponse(BaseModel):
    success: bool
    message: str

class HealthResponse(BaseModel):
    status: str                 # "ok" | "error"
    dataAvailable: bool
    message: Optional[str] = None

class StatusResponse(BaseModel):
    status: LockStatus
    principal: Optional[str] = None
    keys: int
    patterns: int
    logs: int
    stale: Dict[str, bool]

# ========== Keys ==========
class CreateKeyRequest(BaseModel):
    uid: str = Field("", description="Card UID (e.g. A3 B4 C5)")
    name: str = Field("", description="Owner name (e.g. Mom)")

class CreateKeyResponse(BaseModel):
    id: Optional[str]
    success: bool
    message: str

class KeysResponse(BaseModel):
    keys: List[AccessKey]
    stale: bool = False

# ========== Knock patterns ==========
class TapRequest(BaseModel):
    timestamp: Optional[int] = Field(None, description="Tap time in epoch ms; server clock if omitted")

class SavePatternRequest(BaseModel):
    name: str = ""

class RecordingState(BaseModel):
    recording: bool
    tapCount: int
    taps: List[int]

class SavePatternResponse(BaseModel):
    id: str
    name: str
    intervals: List[int]

class PatternsResponse(BaseModel):
    patterns: List[KnockPattern]
    stale: bool = False
    maxPatterns: int
    maxReached: bool

# ========== Logs ==========
class LogsResponse(BaseModel):
    logs: List[AccessLogEntry]
    stale: bool = False
    retentionDays: int

class PruneResponse(BaseModel):
    deleted: int
