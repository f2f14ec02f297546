from __future__ import annotations


class cfg:
    """Cursor tuning (timing is scaled from the configured animation options)"""

    # --- Duration scaling by travel distance ---
    REFERENCE_DISTANCE_PX = 600.0  # moves this long (or longer) get the full duration
    MIN_DISTANCE_SCALE = 0.35  # short hops still animate visibly
    ZERO_DISTANCE_EPS_PX = 0.5

    # --- Page-side transition completion ---
    TRANSITION_FALLBACK_MS = 120  # page resolves anyway if transitionend never fires
    TRANSITION_GUARD_MS = 2000  # python gives up if the page never answers

    # --- Annotation label ---
    ANNOTATION_MIN_MS = 1200
    ANNOTATION_DURATION_FACTOR = 4.0

    # --- Click pulse ---
    CLICK_PULSE_MS = 300

    # --- Marker look ---
    MARKER_SIZE_PX = 18
    MARKER_Z_INDEX = 2147483647
