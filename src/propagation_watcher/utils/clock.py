"""Wall-clock helpers."""

from __future__ import annotations

import time
from collections.abc import Callable

Clock = Callable[[], int]
"""Returns unix time in milliseconds."""


def now_ms() -> int:
    """Current unix time in milliseconds."""
    return time.time_ns() // 1_000_000
