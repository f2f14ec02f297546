from __future__ import annotations
import asyncio
import logging
import math
from dataclasses import dataclass
from pathlib import Path as FSPath
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from ..page import PageScript
from .telemetry import CLICK, MOVE, NAVIGATE, CursorEvent, get_cursor_recorder, get_trajectory_callback

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]
Point = Tuple[float, float]
Segment = Tuple[Point, Point, Optional[float]]

_VIEWPORT_JS = "() => ({ w: window.innerWidth || 0, h: window.innerHeight || 0 })"

# slow -> fast
SPEED_STOPS: Sequence[RGB] = ((0, 120, 255), (60, 205, 60), (255, 60, 60))

LEGEND_GAP_PX = 20
LEGEND_BAR_PX = 18
LEGEND_LABEL_PX = 42


@dataclass(frozen=True)
class TrajectoryStyle:
    background: RGB = (12, 12, 14)
    snap: RGB = (150, 150, 150)
    click: RGB = (255, 200, 80)
    text: RGB = (210, 210, 210)
    line_width: int = 2
    click_radius: int = 5
    margin: int = 20


def _quantile(values: Sequence[float], q: float) -> float:
    """Linear-interpolated quantile, q in [0, 1]."""
    if not values:
        return 0.0
    ordered = sorted(values)
    pos = min(1.0, max(0.0, q)) * (len(ordered) - 1)
    below = ordered[int(math.floor(pos))]
    above = ordered[int(math.ceil(pos))]
    return below + (above - below) * (pos - math.floor(pos))


def _speed_to_rgb(speed: float, v_min: float, v_max: float) -> RGB:
    """Blend along SPEED_STOPS: slow is blue, fast is red."""
    span = v_max - v_min
    t = 0.0 if span <= 0 else min(1.0, max(0.0, (speed - v_min) / span))
    scaled = t * (len(SPEED_STOPS) - 1)
    index = min(int(scaled), len(SPEED_STOPS) - 2)
    local = scaled - index
    start, end = SPEED_STOPS[index], SPEED_STOPS[index + 1]
    return tuple(int(a + (b - a) * local) for a, b in zip(start, end))


def _segments(events: List[CursorEvent]) -> List[Segment]:
    """Pair consecutive moves into (start, end, px/ms or None for a snap)."""
    segments: List[Segment] = []
    previous: Optional[CursorEvent] = None
    for event in events:
        if event.kind == NAVIGATE:
            previous = None
            continue
        if event.kind != MOVE:
            continue
        if previous is not None:
            travel = math.hypot(event.x - previous.x, event.y - previous.y)
            speed = travel / event.duration_ms if event.duration_ms > 0 else None
            segments.append(((previous.x, previous.y), (event.x, event.y), speed))
        previous = event
    return segments


class _Canvas:
    """Viewport-sized drawing area plus a speed legend on the right."""

    def __init__(self, viewport: Tuple[int, int], style: TrajectoryStyle):
        self.width, self.height = viewport
        self.style = style
        size = (
            self.width + style.margin * 2 + LEGEND_GAP_PX + LEGEND_BAR_PX + LEGEND_LABEL_PX,
            self.height + style.margin * 2,
        )
        self.image = Image.new("RGB", size, style.background)
        self.draw = ImageDraw.Draw(self.image)

    def point(self, x: float, y: float) -> Point:
        # off-viewport coordinates are pinned to the edge
        m = self.style.margin
        return m + min(max(x, 0.0), self.width - 1.0), m + min(max(y, 0.0), self.height - 1.0)

    def strokes(self, segments: List[Segment], v_min: float, v_max: float) -> None:
        for start, end, speed in segments:
            color = self.style.snap if speed is None else _speed_to_rgb(speed, v_min, v_max)
            self.draw.line(
                [self.point(*start), self.point(*end)], fill=color, width=self.style.line_width
            )

    def clicks(self, events: List[CursorEvent]) -> None:
        r = self.style.click_radius
        for event in events:
            if event.kind != CLICK:
                continue
            x, y = self.point(event.x, event.y)
            self.draw.ellipse([x - r - 4, y - r - 4, x + r + 4, y + r + 4], outline=(255, 140, 40))
            self.draw.ellipse([x - r, y - r, x + r, y + r], outline=self.style.click, width=2)

    def legend(self, v_min: float, v_max: float) -> None:
        left = self.style.margin + self.width + LEGEND_GAP_PX
        top = self.style.margin
        rows = max(80, self.height - 40)
        for row in range(rows):
            speed = v_max - (v_max - v_min) * row / max(1, rows - 1)
            self.draw.line(
                [(left, top + row), (left + LEGEND_BAR_PX, top + row)],
                fill=_speed_to_rgb(speed, v_min, v_max),
            )
        label_x = left + LEGEND_BAR_PX + 4
        self.draw.text((label_x, top), f"fast\n{v_max:.2f}", fill=self.style.text)
        self.draw.text((label_x, top + rows - 24), f"slow\n{v_min:.2f}", fill=self.style.text)

    def caption(self, text: str) -> None:
        m = self.style.margin
        self.draw.text((m, self.height + m - 14), text, fill=self.style.text)


def render_trajectory(
    events: List[CursorEvent],
    outfile: str,
    viewport: Tuple[int, int],
    style: TrajectoryStyle = TrajectoryStyle(),
    annotate: bool = True,
) -> str:
    """Draw the events into a JPEG (blocking)."""
    canvas = _Canvas(viewport, style)
    segments = _segments(events)
    speeds = [speed for _, _, speed in segments if speed is not None]
    v_min, v_max = (_quantile(speeds, 0.05), _quantile(speeds, 0.95)) if speeds else (0.0, 1.0)
    if v_max <= v_min:
        v_max = v_min + 1e-6

    canvas.strokes(segments, v_min, v_max)
    canvas.clicks(events)
    canvas.legend(v_min, v_max)
    if annotate:
        clicks = sum(1 for event in events if event.kind == CLICK)
        pages = 1 + sum(1 for event in events if event.kind == NAVIGATE)
        canvas.caption(
            f"moves: {len(segments)}  animated: {len(speeds)}  clicks: {clicks}  pages: {pages}"
            if segments
            else "no cursor moves recorded"
        )

    canvas.image.save(outfile, format="JPEG", quality=90)
    return outfile


async def save_cursor_trajectory_jpeg(
    page: PageScript,
    outfile: str = "cursor_trajectory.jpg",
    *,
    viewport: Optional[Tuple[int, int]] = None,
    style: TrajectoryStyle = TrajectoryStyle(),
    annotate: bool = True,
) -> str:
    """
    Render the page's recorded cursor moves into a JPEG.

    Animated segments are colored by speed (px/ms), snaps are grey and
    clicks are rings. A navigation starts a new stroke. Drawing runs in a
    worker thread; a registered trajectory callback gets the saved path.
    """
    if viewport is None:
        size = await page.evaluate(_VIEWPORT_JS) or {}
        viewport = (int(size.get("w", 0)) or 1280, int(size.get("h", 0)) or 720)
    events = list(get_cursor_recorder(page).events)

    saved = await asyncio.to_thread(render_trajectory, events, outfile, viewport, style, annotate)

    callback = get_trajectory_callback()
    if callback is not None:
        asyncio.create_task(callback(FSPath(saved)))
    else:
        logger.debug("Trajectory saved to %s (no callback registered)", saved)
    return saved
