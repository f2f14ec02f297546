from .sequencer import CursorSequencer, ClickInfo, compute_move_duration_ms
from .state import CoordinateCache, cursor_position
from .render import save_cursor_trajectory_jpeg
from .telemetry import get_cursor_recorder, set_trajectory_callback

__all__ = [
    "CursorSequencer",
    "ClickInfo",
    "compute_move_duration_ms",
    "CoordinateCache",
    "cursor_position",
    "save_cursor_trajectory_jpeg",
    "get_cursor_recorder",
    "set_trajectory_callback",
]
