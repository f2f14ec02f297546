from __future__ import annotations
from typing import Dict, Tuple


class kcfg:
    # Per-character delay comes from animation.keyboard.type_delay_ms;
    # these bound it and add the extra beats for line breaks.
    MAX_TYPE_DELAY_MS = 1000.0
    NEWLINE_EXTRA_DELAY_MS = 40.0

    # Named keys: key -> (code, windows virtual key code)
    SPECIAL_KEYS: Dict[str, Tuple[str, int]] = {
        "Enter": ("Enter", 13),
        "Tab": ("Tab", 9),
        "Backspace": ("Backspace", 8),
        "Escape": ("Escape", 27),
        "ArrowDown": ("ArrowDown", 40),
        "ArrowUp": ("ArrowUp", 38),
    }

    # Characters mapped to named keys while typing
    CHAR_KEYS: Dict[str, str] = {"\n": "Enter", "\t": "Tab"}
