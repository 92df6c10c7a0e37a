# =======================================================================================
# knocklock/utils/validators.py - Validation Helpers
# =======================================================================================
from typing import List, Optional, Sequence
from .exceptions import ValidationError, PatternTooShortError


def require_text(value: Optional[str], field: str) -> str:
    """Return the stripped value, or raise if it is missing or blank."""
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def derive_intervals(taps: Sequence[int]) -> List[int]:
    """
    Convert tap timestamps (ms) into the stored encoding:
    intervals[i] = taps[i+1] - taps[i], one fewer entry than taps.
    """
    if len(taps) < 2:
        raise PatternTooShortError("Pattern too short! Tap at least twice.")

    intervals = [later - earlier for earlier, later in zip(taps, taps[1:])]
    if any(i < 0 for i in intervals):
        raise ValidationError("Tap timestamps must not go backwards")
    return intervals
