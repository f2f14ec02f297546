from __future__ import annotations
import asyncio
import math
from typing import Awaitable, Tuple


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Restrict value to [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def distance(start: Tuple[float, float], end: Tuple[float, float]) -> float:
    """Euclidean distance between two viewport points."""
    return math.hypot(end[0] - start[0], end[1] - start[1])


def sleep_ms(ms: float) -> Awaitable[None]:
    """Sleep for a (possibly negative) number of milliseconds."""
    return asyncio.sleep(max(0.0, ms) / 1000.0)
