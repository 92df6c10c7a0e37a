# =======================================================================================
# knocklock/utils/exceptions.py - Custom Exceptions
# =======================================================================================
class KnockLockError(Exception):
    """Base exception for the smart lock control core."""
    pass

class ValidationError(KnockLockError):
    """Raised when user input fails a local check; nothing was written."""
    pass

class PatternTooShortError(ValidationError):
    """Raised when a knock recording has fewer than two taps."""
    pass

class PatternLimitError(ValidationError):
    """Raised when the enrolled knock pattern cap has been reached."""
    pass

class PrincipalNotResolvedError(KnockLockError):
    """Raised when a write is attempted before the device owner is known."""
    pass

class StoreError(KnockLockError):
    """Raised when a remote store read, write or delete fails."""
    pass

class RecordNotFoundError(StoreError):
    """Raised when an update targets a record that does not exist."""
    pass

class ConfirmationError(KnockLockError):
    """Raised when a delete confirmation token is unknown, used or expired."""
    pass

class UnlockInProgressError(KnockLockError):
    """Raised when an unlock is requested while another is still being sent."""
    pass
