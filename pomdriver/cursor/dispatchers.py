from __future__ import annotations
import logging
from zendriver import cdp

from ..page import PageScript
from ..utils import sleep_ms
from .telemetry import get_cursor_recorder

logger = logging.getLogger(__name__)


def _left_button():
    """Return the CDP left mouse button."""
    button_enum = getattr(cdp.input_, "MouseButton", None)
    if button_enum is not None and hasattr(button_enum, "LEFT"):
        return button_enum.LEFT
    return "left"


async def emit_mouse_move(page: PageScript, x: float, y: float) -> None:
    """Move the real (CDP) pointer so hover styles follow the marker."""
    await page.send_input(
        cdp.input_.dispatch_mouse_event(type_="mouseMoved", x=float(x), y=float(y)),
        label="mouseMoved",
    )


async def emit_click(page: PageScript, x: float, y: float, *, delay_ms: float = 0.0) -> None:
    """Emit a full click (press, configured delay, release) at (x,y).

    Dispatched at the coordinate regardless of overlays or actionability,
    i.e. a forced click.
    """
    button = _left_button()
    get_cursor_recorder(page).log_click(x, y)
    logger.debug("click at (%.1f, %.1f) delay=%.0fms", x, y, delay_ms)
    await page.send_input(
        cdp.input_.dispatch_mouse_event(
            type_="mousePressed", x=float(x), y=float(y), button=button, click_count=1
        ),
        label="mousePressed",
    )
    if delay_ms > 0:
        await sleep_ms(delay_ms)
    await page.send_input(
        cdp.input_.dispatch_mouse_event(
            type_="mouseReleased", x=float(x), y=float(y), button=button, click_count=1
        ),
        label="mouseReleased",
    )
