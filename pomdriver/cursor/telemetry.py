from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path as FSPath
from typing import Awaitable, Callable, List, Optional

logger = logging.getLogger(__name__)

MOVE = "move"
CLICK = "click"
NAVIGATE = "navigate"

TrajectoryCallback = Optional[Callable[[FSPath], Awaitable[None]]]
_on_trajectory_saved: TrajectoryCallback = None


def set_trajectory_callback(cb: TrajectoryCallback) -> None:
    """Async hook called with the path of every saved trajectory JPEG (None clears it)."""
    global _on_trajectory_saved
    _on_trajectory_saved = cb
    logger.info("Cursor trajectory callback %s", "registered" if cb else "cleared")


def get_trajectory_callback() -> TrajectoryCallback:
    return _on_trajectory_saved


@dataclass
class CursorEvent:
    x: float
    y: float
    t: float  # seconds since the recorder's origin
    kind: str  # MOVE | CLICK | NAVIGATE
    duration_ms: float = 0.0  # animated travel time of a MOVE


@dataclass
class TrajectoryRecorder:
    """Cursor events of one page, kept for diagnosing failed runs."""

    events: List[CursorEvent] = field(default_factory=list)
    origin: float = field(default_factory=time.perf_counter)

    def _elapsed(self) -> float:
        return time.perf_counter() - self.origin

    def log_move(self, x: float, y: float, duration_ms: float = 0.0) -> None:
        self.events.append(CursorEvent(x, y, self._elapsed(), MOVE, duration_ms))

    def log_click(self, x: float, y: float) -> None:
        self.events.append(CursorEvent(x, y, self._elapsed(), CLICK))

    def log_navigation(self) -> None:
        """The next move starts a new stroke."""
        self.events.append(CursorEvent(0.0, 0.0, self._elapsed(), NAVIGATE))

    def reset(self) -> None:
        self.events.clear()
        self.origin = time.perf_counter()


def get_cursor_recorder(page) -> TrajectoryRecorder:
    """Recorder attached to ``page``, created on first use."""
    recorder: Optional[TrajectoryRecorder] = getattr(page, "_pomdriver_cursor_recorder", None)
    if recorder is None:
        recorder = TrajectoryRecorder()
        setattr(page, "_pomdriver_cursor_recorder", recorder)
    return recorder
