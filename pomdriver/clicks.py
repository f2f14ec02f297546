"""Click-instrumentation synchronization.

The instrumented app wraps every generated click handler so that it dispatches
a ``CustomEvent`` named ``__testid_event__`` on ``globalThis`` with
``detail = {testId, phase, err?}``, phase being ``before``, ``after`` or
``error``. While the page-global ``__testid_click_event_strict__`` flag is
true, the wrapper must not silently skip the terminal ``after``/``error``
event.

A small forwarder installed in every document relays those events to a CDP
binding, so waiting for a click is a plain asyncio future on this side.
"""

from __future__ import annotations
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .errors import ClickHandlerError, ClickTimeoutError, ContextDestroyedError
from .page import PageScript

logger = logging.getLogger(__name__)

TESTID_CLICK_EVENT_NAME = "__testid_event__"
TESTID_CLICK_EVENT_STRICT_FLAG = "__testid_click_event_strict__"
CLICK_EVENT_BINDING = "__pomdriver_click_event__"

DEFAULT_CLICK_TIMEOUT_MS = 2000

PHASE_BEFORE = "before"
PHASE_AFTER = "after"
PHASE_ERROR = "error"

_FORWARDER_JS = """(args) => {
  const g = globalThis;
  if (args.strict) g[args.strictFlag] = true;
  if (g.__pomdriver_click_forwarder__) return false;
  g.__pomdriver_click_forwarder__ = true;
  g.addEventListener(args.eventName, (evt) => {
    const d = evt && evt.detail;
    if (!d || typeof g[args.binding] !== "function") return;
    g[args.binding](JSON.stringify({ testId: d.testId, phase: d.phase, err: d.err }));
  });
  return true;
}"""


@dataclass(frozen=True)
class ClickEvent:
    """One ``__testid_event__`` as seen from the page."""

    test_id: Optional[str]
    phase: Optional[str]
    err: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: str) -> Optional["ClickEvent"]:
        try:
            data = json.loads(payload)
        except (TypeError, ValueError):
            logger.debug("Ignoring malformed click event payload %r", payload)
            return None
        if not isinstance(data, dict):
            return None
        return cls(
            test_id=data.get("testId"),
            phase=data.get("phase"),
            err=data.get("err") or None,
        )

    @property
    def is_terminal(self) -> bool:
        return self.phase in (PHASE_AFTER, PHASE_ERROR)


class ClickWait:
    """A registered wait for one test id's terminal click event.

    Await it (or call :meth:`wait`) to start the timer. Listener and
    navigation subscriptions are dropped on every exit path.
    """

    def __init__(self, synchronizer: "ClickEventSynchronizer", test_id: str, timeout_ms: float):
        self.test_id = test_id
        self.timeout_ms = timeout_ms
        self._synchronizer = synchronizer
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._unsubscribers: List[Callable[[], None]] = []
        self._closed = False
        self.interrupted_by: Optional[str] = None

    def deliver(self, event: ClickEvent) -> None:
        if self._future.done() or event.test_id != self.test_id:
            return
        if event.phase == PHASE_ERROR:
            self._future.set_exception(ClickHandlerError(self.test_id, event.err))
        elif event.phase == PHASE_AFTER:
            self._future.set_result(None)

    def interrupt(self, reason: str) -> None:
        """The page went away mid-wait; the click already happened."""
        if self._future.done():
            return
        self.interrupted_by = reason
        logger.debug(
            "%s while waiting for '%s' click event (likely navigation)", reason, self.test_id
        )
        self._future.set_result(None)

    async def wait(self) -> None:
        try:
            await asyncio.wait_for(self._future, timeout=self.timeout_ms / 1000.0)
        except asyncio.TimeoutError:
            raise ClickTimeoutError(
                TESTID_CLICK_EVENT_NAME, self.test_id, self.timeout_ms
            ) from None
        finally:
            self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if not self._future.done():
            self._future.cancel()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self._synchronizer._forget(self)

    def __await__(self):
        return self.wait().__await__()


class ClickEventSynchronizer:
    """Waits for the page to confirm that a specific click handler finished."""

    def __init__(
        self,
        page: PageScript,
        *,
        strict: bool = True,
        default_timeout_ms: float = DEFAULT_CLICK_TIMEOUT_MS,
    ):
        self.page = page
        self.strict = strict
        self.default_timeout_ms = default_timeout_ms
        self._waiters: Dict[str, List[ClickWait]] = {}
        self._installed = False
        self._install_lock = asyncio.Lock()

    def _forwarder_args(self) -> dict:
        return {
            "eventName": TESTID_CLICK_EVENT_NAME,
            "strictFlag": TESTID_CLICK_EVENT_STRICT_FLAG,
            "binding": CLICK_EVENT_BINDING,
            "strict": self.strict,
        }

    async def install(self) -> None:
        """Expose the binding and install the forwarder (once per page)."""
        async with self._install_lock:
            if self._installed:
                return
            await self.page.expose_binding(CLICK_EVENT_BINDING, self._on_payload)
            await self.page.add_init_script(
                f"({_FORWARDER_JS})({json.dumps(self._forwarder_args())})"
            )
            self._installed = True
        await self.page.evaluate(_FORWARDER_JS, self._forwarder_args())

    def _on_payload(self, payload: str) -> None:
        event = ClickEvent.from_payload(payload)
        if event is None or not event.test_id:
            return
        logger.debug("saw %s testId=%r phase=%r", TESTID_CLICK_EVENT_NAME, event.test_id, event.phase)
        for wait in list(self._waiters.get(event.test_id, ())):
            wait.deliver(event)

    def _forget(self, wait: ClickWait) -> None:
        waits = self._waiters.get(wait.test_id)
        if not waits:
            return
        if wait in waits:
            waits.remove(wait)
        if not waits:
            del self._waiters[wait.test_id]

    async def arm(self, test_id: str, timeout_ms: Optional[float] = None) -> ClickWait:
        """Register interest in ``test_id`` before (or right after) clicking it."""
        timeout_ms = self.default_timeout_ms if timeout_ms is None else timeout_ms
        wait = ClickWait(self, test_id, timeout_ms)
        self._waiters.setdefault(test_id, []).append(wait)
        wait._unsubscribers.append(
            self.page.on_navigate(lambda url: wait.interrupt(f"navigation to {url}"))
        )
        wait._unsubscribers.append(
            self.page.on_context_cleared(lambda: wait.interrupt("execution context destroyed"))
        )
        logger.debug(
            "waiting for '%s' after (timeout=%.0fms, strict=%s)", test_id, timeout_ms, self.strict
        )
        try:
            # also (re)sets the strict flag in the current document
            await self.install()
        except ContextDestroyedError:
            wait.interrupt("execution context destroyed")
        except BaseException:
            wait.close()
            raise
        return wait

    async def wait_for_click_event(self, test_id: str, timeout_ms: Optional[float] = None) -> None:
        wait = await self.arm(test_id, timeout_ms)
        await wait.wait()
