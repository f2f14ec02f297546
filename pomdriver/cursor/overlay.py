from __future__ import annotations
import asyncio
import logging

from ..errors import AnimationTimeoutError
from ..page import PageScript
from .config import cfg

logger = logging.getLogger(__name__)

MARKER_ID = "__pomdriver_cursor__"
ANNOTATION_CLASS = "__pomdriver_annotation__"

INSTALL_CURSOR_JS = """(args) => {
  let el = document.getElementById(args.id);
  if (el) return false;
  el = document.createElement("div");
  el.id = args.id;
  el.setAttribute("aria-hidden", "true");
  Object.assign(el.style, {
    position: "fixed", left: "0px", top: "0px",
    width: args.size + "px", height: args.size + "px",
    marginLeft: (-args.size / 2) + "px", marginTop: (-args.size / 2) + "px",
    borderRadius: "50%", background: "rgba(255, 80, 80, 0.55)",
    border: "2px solid rgba(255, 255, 255, 0.9)", boxSizing: "border-box",
    pointerEvents: "none", zIndex: String(args.z),
    transform: "translate(-100px, -100px)",
  });
  (document.body || document.documentElement).appendChild(el);
  return true;
}"""

ANIMATE_CURSOR_JS = """(args) => new Promise((resolve) => {
  const el = document.getElementById(args.id);
  if (!el) { resolve("missing"); return; }
  const target = "translate(" + args.x + "px, " + args.y + "px)";
  if (args.duration_ms <= 0) {
    el.style.transition = "none";
    el.style.transform = target;
    resolve("snap");
    return;
  }
  let done = false;
  const finish = (how) => {
    if (done) return;
    done = true;
    el.removeEventListener("transitionend", onEnd);
    clearTimeout(timer);
    resolve(how);
  };
  const onEnd = (evt) => { if (evt.propertyName === "transform") finish("transitionend"); };
  const timer = setTimeout(() => finish("fallback"), args.duration_ms + args.fallback_ms);
  el.addEventListener("transitionend", onEnd);
  el.style.transition = "transform " + args.duration_ms + "ms " + args.easing;
  requestAnimationFrame(() => { el.style.transform = target; });
})"""

CLICK_PULSE_JS = """(args) => {
  const el = document.getElementById(args.id);
  if (!el || !el.animate) return false;
  el.animate(
    [{ boxShadow: "0 0 0 0 rgba(255, 80, 80, 0.7)" }, { boxShadow: "0 0 0 14px rgba(255, 80, 80, 0)" }],
    { duration: args.pulse_ms, easing: "ease-out" },
  );
  return true;
}"""

ANNOTATE_JS = """(args) => {
  const label = document.createElement("div");
  label.className = args.cls;
  label.textContent = args.text;
  Object.assign(label.style, {
    position: "fixed", left: (args.x + 14) + "px", top: (args.y + 14) + "px",
    padding: "2px 6px", borderRadius: "4px", font: "12px sans-serif",
    background: "rgba(20, 20, 20, 0.85)", color: "#fff",
    pointerEvents: "none", zIndex: String(args.z),
  });
  (document.body || document.documentElement).appendChild(label);
  setTimeout(() => label.remove(), args.remove_after_ms);
  return true;
}"""


async def install_cursor(page: PageScript) -> bool:
    """Create the marker in the current document; False if it was already there."""
    created = await page.evaluate(
        INSTALL_CURSOR_JS,
        {"id": MARKER_ID, "size": cfg.MARKER_SIZE_PX, "z": cfg.MARKER_Z_INDEX},
    )
    return bool(created)


async def animate_cursor(
    page: PageScript, x: float, y: float, *, duration_ms: float, easing: str
) -> str:
    """Transition the marker to (x,y); returns how the page finished it."""
    guard_s = (max(0.0, duration_ms) + cfg.TRANSITION_FALLBACK_MS + cfg.TRANSITION_GUARD_MS) / 1000.0
    try:
        outcome = await asyncio.wait_for(
            page.evaluate(
                ANIMATE_CURSOR_JS,
                {
                    "id": MARKER_ID,
                    "x": x,
                    "y": y,
                    "duration_ms": duration_ms,
                    "easing": easing,
                    "fallback_ms": cfg.TRANSITION_FALLBACK_MS,
                },
            ),
            timeout=guard_s,
        )
    except asyncio.TimeoutError:
        raise AnimationTimeoutError(
            f"Cursor transition to ({x:.0f}, {y:.0f}) not acknowledged within "
            f"{guard_s * 1000.0:.0f}ms"
        ) from None
    if outcome == "fallback":
        logger.warning(
            "transitionend never fired for cursor move (%.0fms); used fallback timer",
            duration_ms,
        )
    return str(outcome)


async def pulse_click(page: PageScript) -> None:
    await page.evaluate(CLICK_PULSE_JS, {"id": MARKER_ID, "pulse_ms": cfg.CLICK_PULSE_MS})


async def annotate(page: PageScript, text: str, x: float, y: float, *, movement_ms: float) -> None:
    """Show a label near (x,y); the page removes it on its own."""
    remove_after_ms = max(cfg.ANNOTATION_MIN_MS, movement_ms * cfg.ANNOTATION_DURATION_FACTOR)
    await page.evaluate(
        ANNOTATE_JS,
        {
            "cls": ANNOTATION_CLASS,
            "text": text,
            "x": x,
            "y": y,
            "remove_after_ms": remove_after_ms,
            "z": cfg.MARKER_Z_INDEX,
        },
    )
