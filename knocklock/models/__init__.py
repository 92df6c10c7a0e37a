# =======================================================================================
# knocklock/models/__init__.py - Models Package
# =======================================================================================
from .schemas import *
from .enums import *

__all__ = [
    "AccessKey", "KnockPattern", "AccessLogEntry", "UnlockResponse", "ConfirmationToken",
    "ActionResponse", "HealthResponse", "StatusResponse", "CreateKeyRequest",
    "CreateKeyResponse", "KeysResponse", "TapRequest", "SavePatternRequest",
    "RecordingState", "SavePatternResponse", "PatternsResponse", "LogsResponse",
    "PruneResponse", "LogType", "CommandType", "ResultType", "Collection",
    "LockStatus", "SinkAction", "COMMAND_SOURCE", "REMOTE_UNLOCK_DETAIL",
    "DELETE_PROMPTS", "collection_path",
]
