# =======================================================================================
# knocklock/utils/clock.py - Wall Clock
# =======================================================================================
import time
from typing import Callable

# Every timestamp written to the store comes from here (client wall clock, epoch ms).
Clock = Callable[[], int]


def now_ms() -> int:
    return int(time.time() * 1000)
