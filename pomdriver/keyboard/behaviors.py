from __future__ import annotations
import logging
from typing import Optional

from ..config import get_animation_options, resolve_animation, AnimationSource
from ..page import PageScript
from ..utils import clamp, sleep_ms
from .config import kcfg
from .primitives import emit_insert_text, press_key

logger = logging.getLogger(__name__)


def resolve_type_delay_ms(animation_source: AnimationSource = get_animation_options) -> float:
    settings = resolve_animation(animation_source())
    return clamp(settings.keyboard.type_delay_ms, 0.0, kcfg.MAX_TYPE_DELAY_MS)


async def type_text(
    page: PageScript,
    text: str,
    *,
    delay_ms: Optional[float] = None,
    animation_source: AnimationSource = get_animation_options,
) -> None:
    """
    Type text into the focused element one character at a time.

    The per-character delay defaults to the configured
    ``keyboard.type_delay_ms``; with a zero delay the whole text is inserted
    in one go. Newlines and tabs are sent as Enter/Tab key presses.
    """
    if not text:
        return
    if delay_ms is None:
        delay_ms = resolve_type_delay_ms(animation_source)
    delay_ms = clamp(delay_ms, 0.0, kcfg.MAX_TYPE_DELAY_MS)

    if delay_ms <= 0 and not any(ch in kcfg.CHAR_KEYS for ch in text):
        await emit_insert_text(page, text)
        return

    logger.debug("typing %d chars at %.0fms/char", len(text), delay_ms)
    for index, ch in enumerate(text):
        if index:
            await sleep_ms(delay_ms)
        key = kcfg.CHAR_KEYS.get(ch)
        if key is not None:
            await press_key(page, key)
            await sleep_ms(kcfg.NEWLINE_EXTRA_DELAY_MS if ch == "\n" else 0.0)
        else:
            await emit_insert_text(page, ch)


async def fill(
    page: PageScript,
    selector: str,
    text: str,
    *,
    delay_ms: Optional[float] = None,
    animation_source: AnimationSource = get_animation_options,
) -> None:
    """Focus and clear the element, then type into it."""
    await page.focus(selector, clear=True)
    await type_text(page, text, delay_ms=delay_ms, animation_source=animation_source)
