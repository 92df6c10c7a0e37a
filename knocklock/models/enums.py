# =======================================================================================
# knocklock/models/enums.py - Enums and Constants
# =======================================================================================
from enum import Enum
from typing import Literal

# Type aliases for better type hints
LogType = Literal["UNLOCK", "RFID_ACCESS", "KNOCK_ACCESS", "DENIED", "SYSTEM"]
CommandType = Literal["UNLOCK"]
ResultType = Literal["PASS", "FAIL"]

# Origin tag written on every command issued from this service
COMMAND_SOURCE = "WEB_APP"
REMOTE_UNLOCK_DETAIL = "Remote unlock via App"

class Collection(str, Enum):
    """Collections stored under the principal's namespace."""
    RFID_TAGS = "rfid_tags"
    KNOCK_PATTERNS = "knock_patterns"
    ACCESS_LOGS = "access_logs"
    COMMANDS = "commands"

class LockStatus(str, Enum):
    """Remote unlock state as shown on the dashboard."""
    LOCKED = "LOCKED"
    UNLOCKING = "UNLOCKING"
    UNLOCKED = "UNLOCKED"
    ERROR = "ERROR"

class SinkAction(str, Enum):
    """Actions understood by the external audit sink."""
    LOG = "log"
    ADD_TAG = "add_tag"
    ADD_PATTERN = "add_pattern"

# Prompts attached to two-phase delete tokens
DELETE_PROMPTS = {
    Collection.RFID_TAGS: "Permanently delete this key?",
    Collection.KNOCK_PATTERNS: "Delete this knock pattern?",
}


def collection_path(principal: str, collection: Collection) -> str:
    """Store path of a collection for the given principal."""
    return f"users/{principal}/{collection.value}"
