# =======================================================================================
# knocklock/utils/__init__.py - Utils Package
# =======================================================================================
from .exceptions import *
from .validators import *
from .clock import Clock, now_ms

__all__ = [
    "KnockLockError", "ValidationError", "PatternTooShortError", "PatternLimitError",
    "PrincipalNotResolvedError", "StoreError", "RecordNotFoundError",
    "ConfirmationError", "UnlockInProgressError",
    "require_text", "derive_intervals", "Clock", "now_ms",
]
