from __future__ import annotations
from zendriver import cdp

from ..page import PageScript
from .config import kcfg


async def emit_insert_text(page: PageScript, text: str) -> None:
    await page.send_input(cdp.input_.insert_text(text=text), label="insertText")


async def press_key(page: PageScript, key: str) -> None:
    """Press and release a named key (Enter, Tab, Backspace, ...)."""
    try:
        code, vk = kcfg.SPECIAL_KEYS[key]
    except KeyError:
        raise ValueError(f"Unsupported key {key!r}; known: {sorted(kcfg.SPECIAL_KEYS)}")
    down_type = "keyDown" if key == "Enter" else "rawKeyDown"
    await page.send_input(
        cdp.input_.dispatch_key_event(
            type_=down_type,
            key=key,
            code=code,
            windows_virtual_key_code=vk,
            native_virtual_key_code=vk,
            text="\r" if key == "Enter" else None,
        ),
        label=f"{key}Down",
    )
    await page.send_input(
        cdp.input_.dispatch_key_event(
            type_="keyUp",
            key=key,
            code=code,
            windows_virtual_key_code=vk,
            native_virtual_key_code=vk,
        ),
        label=f"{key}Up",
    )
