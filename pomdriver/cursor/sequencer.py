from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..clicks import ClickEventSynchronizer, ClickWait
from ..config import AnimationSettings, AnimationSource, get_animation_options, resolve_animation
from ..keyboard import fill as keyboard_fill
from ..page import ElementBox, PageScript
from ..utils import clamp, distance
from . import overlay
from .config import cfg
from .dispatchers import emit_click, emit_mouse_move
from .state import CoordinateCache, cursor_position
from .telemetry import get_cursor_recorder

logger = logging.getLogger(__name__)

DEFAULT_TEST_ID_ATTRIBUTE = "data-testid"


@dataclass(frozen=True)
class ClickInfo:
    """What the sequencer learned about the element it moved to."""

    x: float
    y: float
    test_id: Optional[str] = None
    instrumented: bool = False
    clicked: bool = False


def compute_move_duration_ms(
    settings: AnimationSettings, pace_factor: float, travel_px: float
) -> float:
    """Movement time for one cursor move.

    Zero when animation is disabled, the pace factor is not positive, or the
    cursor is already on the target. Short hops are scaled down but never
    below ``cfg.MIN_DISTANCE_SCALE`` of the configured duration.
    """
    if not settings.enabled or pace_factor <= 0:
        return 0.0
    if travel_px <= cfg.ZERO_DISTANCE_EPS_PX:
        return 0.0
    scale = clamp(travel_px / cfg.REFERENCE_DISTANCE_PX, cfg.MIN_DISTANCE_SCALE, 1.0)
    return settings.pointer.duration_ms * pace_factor * scale


class CursorSequencer:
    """Moves a visible cursor marker to elements and clicks them.

    One instance per page; it owns the "marker installed" flag, which the
    session clears on every main-frame navigation.
    """

    def __init__(
        self,
        page: PageScript,
        *,
        clicks: Optional[ClickEventSynchronizer] = None,
        cursor: Optional[CoordinateCache] = None,
        animation_source: AnimationSource = get_animation_options,
        test_id_attribute: str = DEFAULT_TEST_ID_ATTRIBUTE,
    ):
        self.page = page
        self.clicks = clicks if clicks is not None else ClickEventSynchronizer(page)
        self.cursor = cursor if cursor is not None else cursor_position
        self.animation_source = animation_source
        self.test_id_attribute = (test_id_attribute or "").strip() or DEFAULT_TEST_ID_ATTRIBUTE
        self._cursor_installed = False

    def mark_page_changed(self) -> None:
        """Forget the marker; the next move re-creates it in the new document."""
        self._cursor_installed = False

    async def ensure_cursor(self) -> None:
        if self._cursor_installed:
            return
        await overlay.install_cursor(self.page)
        self._cursor_installed = True

    def _start_point(self, box: ElementBox) -> Tuple[float, float]:
        position = self.cursor.position
        if position is None:
            return box.viewport_width / 2.0, box.viewport_height / 2.0
        return position

    async def _read_test_id(self, selector: str) -> Optional[str]:
        raw = await self.page.get_attribute(selector, self.test_id_attribute)
        trimmed = (raw or "").strip()
        return trimmed or None

    async def move_to(
        self, selector: str, *, pace_factor: float = 1.0, annotation: str = ""
    ) -> Tuple[float, float, float]:
        """Animate the marker onto the element's center; returns (x, y, duration_ms)."""
        settings = resolve_animation(self.animation_source())
        if settings.enabled:
            await self.ensure_cursor()

        box = await self.page.measure(selector)
        target_x, target_y = box.center
        travel = distance(self._start_point(box), (target_x, target_y))
        duration_ms = compute_move_duration_ms(settings, pace_factor, travel)

        if settings.enabled and travel > cfg.ZERO_DISTANCE_EPS_PX:
            await overlay.animate_cursor(
                self.page,
                target_x,
                target_y,
                duration_ms=duration_ms,
                easing=settings.pointer.transition_style,
            )
        await emit_mouse_move(self.page, target_x, target_y)
        self.cursor.update(target_x, target_y)
        get_cursor_recorder(self.page).log_move(target_x, target_y, duration_ms)
        logger.debug(
            "cursor -> %s (%.0f, %.0f) travel=%.0fpx duration=%.0fms",
            selector,
            target_x,
            target_y,
            travel,
            duration_ms,
        )

        if annotation and settings.enabled:
            await overlay.annotate(
                self.page, annotation, target_x, target_y, movement_ms=duration_ms
            )
        return target_x, target_y, duration_ms

    async def move_and_optionally_click(
        self,
        target: str,
        should_click: bool = True,
        pace_factor: float = 1.0,
        annotation: str = "",
        wait_for_confirmation: bool = True,
    ) -> ClickInfo:
        """Move to ``target`` (a CSS selector) and optionally click it.

        When clicking an instrumented element with confirmation requested,
        returns only after the page reported that the click handler finished.
        """
        x, y, _ = await self.move_to(target, pace_factor=pace_factor, annotation=annotation)
        if not should_click:
            return ClickInfo(x, y)

        test_id = await self._read_test_id(target)
        instrumented = test_id is not None
        wait: Optional[ClickWait] = None
        if wait_for_confirmation and instrumented:
            wait = await self.clicks.arm(test_id)

        settings = resolve_animation(self.animation_source())
        try:
            await emit_click(self.page, x, y, delay_ms=settings.pointer.click_delay_ms)
            if settings.enabled:
                await overlay.pulse_click(self.page)
        except BaseException:
            if wait is not None:
                wait.close()
            raise

        if wait is not None:
            await wait
        return ClickInfo(x, y, test_id=test_id, instrumented=instrumented, clicked=True)

    async def move_click_and_fill(
        self,
        target: str,
        text: str,
        should_click: bool = True,
        pace_factor: float = 1.0,
        annotation: str = "",
        wait_for_confirmation: bool = True,
    ) -> ClickInfo:
        """Click flow first (so confirmation observes the click), then type."""
        info = await self.move_and_optionally_click(
            target,
            should_click=should_click,
            pace_factor=pace_factor,
            annotation=annotation,
            wait_for_confirmation=wait_for_confirmation,
        )
        await keyboard_fill(self.page, target, text, animation_source=self.animation_source)
        return info

    async def hover(self, target: str, pace_factor: float = 1.0, annotation: str = "") -> ClickInfo:
        return await self.move_and_optionally_click(
            target, should_click=False, pace_factor=pace_factor, annotation=annotation
        )
