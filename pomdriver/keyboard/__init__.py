from .behaviors import type_text, fill, resolve_type_delay_ms
from .primitives import press_key

__all__ = [
    "type_text",
    "fill",
    "press_key",
    "resolve_type_delay_ms",
]
