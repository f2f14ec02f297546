from __future__ import annotations
import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Union

# False => skip animations (clicks/fills still happen)
AnimationOptions = Union[bool, Mapping[str, Any]]
AnimationSource = Callable[[], AnimationOptions]

TRANSITION_STYLES = ("linear", "ease", "ease-in", "ease-out", "ease-in-out")

DEFAULT_ANIMATION: Dict[str, Any] = {
    "pointer": {
        "duration_ms": 250,
        "transition_style": "ease-in-out",
        "click_delay_ms": 0,
    },
    "keyboard": {"type_delay_ms": 100},
}

_ANIMATION_OPTIONS: AnimationOptions = copy.deepcopy(DEFAULT_ANIMATION)


@dataclass(frozen=True)
class PointerTiming:
    duration_ms: float = 250.0
    transition_style: str = "ease-in-out"
    click_delay_ms: float = 0.0


@dataclass(frozen=True)
class KeyboardTiming:
    type_delay_ms: float = 100.0


@dataclass(frozen=True)
class AnimationSettings:
    """Resolved animation options consumed by the cursor and keyboard code."""

    enabled: bool = True
    pointer: PointerTiming = field(default_factory=PointerTiming)
    keyboard: KeyboardTiming = field(default_factory=KeyboardTiming)


def _non_negative(section: str, key: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"animation.{section}.{key} must be a number, got {value!r}")
    if number < 0:
        raise ValueError(f"animation.{section}.{key} must be >= 0, got {number}")
    return number


def resolve_animation(options: AnimationOptions) -> AnimationSettings:
    """Validate raw animation options and fill in defaults.

    Sections that are omitted fall back to ``DEFAULT_ANIMATION``. ``False``
    disables cursor movement while keeping keyboard pacing at zero delay.
    """
    if options is False:
        return AnimationSettings(
            enabled=False,
            pointer=PointerTiming(duration_ms=0.0, click_delay_ms=0.0),
            keyboard=KeyboardTiming(type_delay_ms=0.0),
        )
    if options is True or options is None:
        options = DEFAULT_ANIMATION
    if not isinstance(options, Mapping):
        raise TypeError(
            f"animation options must be False or a mapping, got {type(options).__name__}"
        )

    pointer_raw = {**DEFAULT_ANIMATION["pointer"], **(options.get("pointer") or {})}
    keyboard_raw = {**DEFAULT_ANIMATION["keyboard"], **(options.get("keyboard") or {})}

    style = str(pointer_raw["transition_style"])
    if style not in TRANSITION_STYLES:
        raise ValueError(
            f"animation.pointer.transition_style must be one of {TRANSITION_STYLES}, "
            f"got {style!r}"
        )

    return AnimationSettings(
        enabled=True,
        pointer=PointerTiming(
            duration_ms=_non_negative("pointer", "duration_ms", pointer_raw["duration_ms"]),
            transition_style=style,
            click_delay_ms=_non_negative(
                "pointer", "click_delay_ms", pointer_raw["click_delay_ms"]
            ),
        ),
        keyboard=KeyboardTiming(
            type_delay_ms=_non_negative(
                "keyboard", "type_delay_ms", keyboard_raw["type_delay_ms"]
            ),
        ),
    )


def set_animation_options(options: AnimationOptions) -> None:
    """Install process-wide animation options (validated eagerly)."""
    global _ANIMATION_OPTIONS
    resolve_animation(options)
    _ANIMATION_OPTIONS = copy.deepcopy(options) if options is not False else False
    logging.getLogger(__name__).debug("Animation options set to %r", _ANIMATION_OPTIONS)


def get_animation_options() -> AnimationOptions:
    """Default animation source: whatever was last installed process-wide."""
    return _ANIMATION_OPTIONS


def reset_animation_options() -> None:
    set_animation_options(DEFAULT_ANIMATION)
