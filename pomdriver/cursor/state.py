from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass
class CoordinateCache:
    """Last rendered cursor position, in viewport pixels.

    ``None`` means no move has happened since the last reset; the sequencer
    then starts from the viewport center.
    """

    x: Optional[float] = None
    y: Optional[float] = None

    @property
    def position(self) -> Optional[Tuple[float, float]]:
        if self.x is None or self.y is None:
            return None
        return self.x, self.y

    def update(self, x: float, y: float) -> None:
        self.x, self.y = float(x), float(y)

    def reset(self) -> None:
        """Forget the position (navigation, test start)."""
        self.x = None
        self.y = None


# Process-wide instance shared by sessions that do not bring their own
cursor_position = CoordinateCache()
