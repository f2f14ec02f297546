from __future__ import annotations
import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from zendriver import cdp
from zendriver.core.connection import ProtocolException

from .errors import ContextDestroyedError, ElementNotFoundError, PageScriptError
from .utils import sleep_ms

logger = logging.getLogger(__name__)

INPUT_SEND_TIMEOUT_S: float = 0.35
SELECTOR_POLL_INTERVAL_MS: float = 50.0

# CDP reports a torn-down JS context only through these messages.
_CONTEXT_GONE_MARKERS = (
    "Execution context was destroyed",
    "Cannot find context with specified id",
    "Inspected target navigated or closed",
    "Target closed",
)

_MEASURE_JS = """(selector) => {
  const el = document.querySelector(selector);
  if (!el) return null;
  el.scrollIntoView({ block: "center", inline: "center" });
  const r = el.getBoundingClientRect();
  return {
    x: r.x, y: r.y, width: r.width, height: r.height,
    viewport_width: window.innerWidth || 0,
    viewport_height: window.innerHeight || 0,
  };
}"""

_EXISTS_JS = """(args) => {
  const el = document.querySelector(args.selector);
  if (!el) return false;
  if (!args.visible) return true;
  const style = window.getComputedStyle(el);
  const r = el.getBoundingClientRect();
  return style.visibility !== "hidden" && style.display !== "none" && r.width > 0 && r.height > 0;
}"""

_ATTRIBUTE_JS = """(args) => {
  const el = document.querySelector(args.selector);
  return el ? el.getAttribute(args.name) : null;
}"""

_TEXT_JS = """(selector) => {
  const el = document.querySelector(selector);
  return el ? el.textContent : null;
}"""

_FOCUS_AND_CLEAR_JS = """(args) => {
  const el = document.querySelector(args.selector);
  if (!el) return false;
  el.focus();
  if (args.clear && "value" in el) {
    el.value = "";
    el.dispatchEvent(new Event("input", { bubbles: true }));
  }
  return true;
}"""

_SELECT_OPTION_JS = """(args) => {
  const el = document.querySelector(args.selector);
  if (!el) return null;
  const options = Array.from(el.options || []);
  const match = options.find(o => o.value === args.value)
    || options.find(o => (o.label || o.textContent || "").trim() === args.value);
  if (!match) return false;
  el.value = match.value;
  el.dispatchEvent(new Event("input", { bubbles: true }));
  el.dispatchEvent(new Event("change", { bubbles: true }));
  return true;
}"""


@dataclass(frozen=True)
class ElementBox:
    """Viewport-relative bounding box of an element plus the viewport size."""

    x: float
    y: float
    width: float
    height: float
    viewport_width: float
    viewport_height: float

    @property
    def center(self):
        return self.x + self.width / 2.0, self.y + self.height / 2.0


def _exception_text(details: Any) -> str:
    exception = getattr(details, "exception", None)
    description = getattr(exception, "description", None) if exception else None
    return str(description or getattr(details, "text", None) or details)


def _raise_for_message(message: str, cause: Optional[BaseException] = None) -> None:
    if any(marker in message for marker in _CONTEXT_GONE_MARKERS):
        raise ContextDestroyedError(message) from cause
    raise PageScriptError(message) from cause


class PageScript:
    """Page-scripting facility over a zendriver tab.

    Everything the rest of the library needs from the browser goes through
    here: in-page evaluation, element measurement, selector waits, input
    dispatch, the current URL, and CDP event subscriptions.
    """

    def __init__(self, tab):
        self.tab = tab

    async def send(self, command) -> Any:
        """Send a CDP command; protocol failures become PageScriptError."""
        try:
            return await self.tab.send(command)
        except ProtocolException as exc:
            _raise_for_message(str(exc), exc)

    async def send_input(self, command, *, label: str) -> None:
        """Bounded-time input dispatch; a stalled send finishes in background."""
        task = asyncio.create_task(self.tab.send(command))
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=INPUT_SEND_TIMEOUT_S)
        except asyncio.TimeoutError:
            logger.warning(
                "CDP %s stalled >%.0f ms; continuing in background",
                label,
                INPUT_SEND_TIMEOUT_S * 1000.0,
            )
        except ProtocolException as exc:
            _raise_for_message(f"CDP {label} failed: {exc}", exc)

    async def evaluate(self, script: str, arg: Any = None, *, await_promise: bool = True) -> Any:
        """Call a JS function expression with one JSON argument and return its value."""
        expression = f"({script})({json.dumps(arg)})"
        result = await self.send(
            cdp.runtime.evaluate(
                expression=expression,
                return_by_value=True,
                await_promise=await_promise,
                user_gesture=True,
            )
        )
        if isinstance(result, tuple):
            remote, details = (result + (None, None))[:2]
        else:
            remote, details = result, None
        if details is not None:
            _raise_for_message(_exception_text(details))
        return getattr(remote, "value", None)

    async def goto(self, url: str) -> None:
        await self.tab.get(url)

    async def url(self) -> str:
        return str(await self.evaluate("() => window.location.href") or "")

    async def measure(self, selector: str) -> ElementBox:
        """Scroll the element into view and return its box."""
        raw = await self.evaluate(_MEASURE_JS, selector)
        if not raw:
            raise ElementNotFoundError(selector)
        return ElementBox(**{k: float(v) for k, v in raw.items()})

    async def exists(self, selector: str, *, visible: bool = False) -> bool:
        return bool(
            await self.evaluate(_EXISTS_JS, {"selector": selector, "visible": visible})
        )

    async def wait_for_selector(
        self, selector: str, *, timeout_ms: float = 3000.0, visible: bool = False
    ) -> None:
        start = time.perf_counter()
        while True:
            try:
                if await self.exists(selector, visible=visible):
                    return
            except ContextDestroyedError as exc:
                logger.debug("wait_for_selector(%r): context gone, retrying (%s)", selector, exc)
            if (time.perf_counter() - start) * 1000.0 >= timeout_ms:
                raise ElementNotFoundError(selector, timeout_ms)
            await sleep_ms(SELECTOR_POLL_INTERVAL_MS)

    async def get_attribute(self, selector: str, name: str) -> Optional[str]:
        return await self.evaluate(_ATTRIBUTE_JS, {"selector": selector, "name": name})

    async def text_content(self, selector: str) -> Optional[str]:
        return await self.evaluate(_TEXT_JS, selector)

    async def focus(self, selector: str, *, clear: bool = False) -> None:
        if not await self.evaluate(
            _FOCUS_AND_CLEAR_JS, {"selector": selector, "clear": clear}
        ):
            raise ElementNotFoundError(selector)

    async def select_option(self, selector: str, value: str) -> None:
        outcome = await self.evaluate(
            _SELECT_OPTION_JS, {"selector": selector, "value": value}
        )
        if outcome is None:
            raise ElementNotFoundError(selector)
        if outcome is False:
            raise PageScriptError(f"No option {value!r} in {selector!r}")

    async def add_init_script(self, source: str) -> None:
        """Run ``source`` in every future document of this tab."""
        await self.send(cdp.page.add_script_to_evaluate_on_new_document(source=source))

    async def expose_binding(
        self, name: str, callback: Callable[[str], None]
    ) -> Callable[[], None]:
        """Expose ``window[name](payload)`` to the page; returns an unsubscribe."""

        def _on_binding(event: cdp.runtime.BindingCalled) -> None:
            if event.name == name:
                callback(event.payload)

        self.tab.add_handler(cdp.runtime.BindingCalled, _on_binding)
        await self.send(cdp.runtime.enable())
        await self.send(cdp.runtime.add_binding(name=name))
        return lambda: self.tab.remove_handlers(cdp.runtime.BindingCalled, _on_binding)

    def on_navigate(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Subscribe to main-frame navigations; returns an unsubscribe."""

        def _on_frame(event: cdp.page.FrameNavigated) -> None:
            if event.frame.parent_id is None:
                callback(event.frame.url)

        self.tab.add_handler(cdp.page.FrameNavigated, _on_frame)
        return lambda: self.tab.remove_handlers(cdp.page.FrameNavigated, _on_frame)

    def on_context_cleared(self, callback: Callable[[], None]) -> Callable[[], None]:
        def _on_cleared(event: cdp.runtime.ExecutionContextsCleared) -> None:
            callback()

        self.tab.add_handler(cdp.runtime.ExecutionContextsCleared, _on_cleared)
        return lambda: self.tab.remove_handlers(
            cdp.runtime.ExecutionContextsCleared, _on_cleared
        )


PageLike = Union[PageScript, Any]


def as_page_script(page: PageLike) -> PageScript:
    """Accept either a PageScript or a raw zendriver tab."""
    if isinstance(page, PageScript):
        return page
    cached: Optional[PageScript] = getattr(page, "_pomdriver_script", None)
    if cached is None:
        cached = PageScript(page)
        setattr(page, "_pomdriver_script", cached)
    return cached


def selector_for_attribute(attribute: str, value: str) -> str:
    return f"[{attribute}={json.dumps(value)}]"
