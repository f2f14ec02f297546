"""Shared fixtures: an in-memory stand-in for a zendriver-backed page."""

import asyncio
import inspect
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from pomdriver.clicks import CLICK_EVENT_BINDING
from pomdriver.config import reset_animation_options
from pomdriver.cursor.overlay import ANIMATE_CURSOR_JS
from pomdriver.cursor.state import cursor_position
from pomdriver.errors import ElementNotFoundError
from pomdriver.page import ElementBox, PageScript


class FakePage(PageScript):
    """PageScript double that records what the library asked the browser to do."""

    def __init__(self, url: str = "http://app.test/"):
        super().__init__(tab=None)
        self.current_url = url
        self.viewport = (1280.0, 720.0)
        self.boxes: Dict[str, Tuple[float, float, float, float]] = {}
        self.attributes: Dict[Tuple[str, str], str] = {}
        self.texts: Dict[str, str] = {}
        self.visible: set = set()
        self.script_results: Dict[str, Any] = {ANIMATE_CURSOR_JS: "transitionend"}
        self.evaluated: List[Tuple[str, Any]] = []
        self.inputs: List[str] = []
        self.focused: List[Tuple[str, bool]] = []
        self.selected: List[Tuple[str, str]] = []
        self.gotos: List[str] = []
        self.init_scripts: List[str] = []
        self.bindings: Dict[str, Callable[[str], None]] = {}
        self.on_release: Optional[Callable[[], None]] = None
        self._navigate_callbacks: List[Callable[[str], None]] = []
        self._cleared_callbacks: List[Callable[[], None]] = []

    # page setup helpers

    def add_element(self, selector, x=100.0, y=100.0, width=100.0, height=40.0, test_id=None,
                    attribute="data-testid", text=None, visible=True):
        self.boxes[selector] = (x, y, width, height)
        if test_id is not None:
            self.attributes[(selector, attribute)] = test_id
        if text is not None:
            self.texts[selector] = text
        if visible:
            self.visible.add(selector)

    def emit_click_event(self, test_id, phase, err=None):
        payload = {"testId": test_id, "phase": phase}
        if err is not None:
            payload["err"] = err
        self.bindings[CLICK_EVENT_BINDING](json.dumps(payload))

    def confirm_clicks_with(self, *events):
        """Emit the given (test_id, phase[, err]) events right after each mouse release."""
        def _release():
            loop = asyncio.get_running_loop()
            for event in events:
                loop.call_soon(self.emit_click_event, *event)

        self.on_release = _release

    def navigate(self, url):
        self.current_url = url
        for callback in list(self._navigate_callbacks):
            callback(url)

    def clear_contexts(self):
        for callback in list(self._cleared_callbacks):
            callback()

    def scripts_run(self, script):
        return [arg for source, arg in self.evaluated if source == script]

    # PageScript surface

    async def send(self, command):
        raise AssertionError(f"unexpected raw CDP command {command!r}")

    async def send_input(self, command, *, label):
        self.inputs.append(label)
        if label == "mouseReleased" and self.on_release is not None:
            self.on_release()

    async def evaluate(self, script, arg=None, *, await_promise=True):
        self.evaluated.append((script, arg))
        result = self.script_results.get(script)
        if callable(result):
            result = result(arg)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, BaseException):
            raise result
        return result

    async def goto(self, url):
        self.gotos.append(url)
        self.navigate(url)

    async def url(self):
        return self.current_url

    async def measure(self, selector):
        if selector not in self.boxes:
            raise ElementNotFoundError(selector)
        x, y, width, height = self.boxes[selector]
        return ElementBox(x, y, width, height, *self.viewport)

    async def exists(self, selector, *, visible=False):
        if visible:
            return selector in self.visible
        return selector in self.boxes

    async def get_attribute(self, selector, name):
        return self.attributes.get((selector, name))

    async def text_content(self, selector):
        return self.texts.get(selector)

    async def focus(self, selector, *, clear=False):
        if selector not in self.boxes:
            raise ElementNotFoundError(selector)
        self.focused.append((selector, clear))

    async def select_option(self, selector, value):
        self.selected.append((selector, value))

    async def add_init_script(self, source):
        self.init_scripts.append(source)

    async def expose_binding(self, name, callback):
        self.bindings[name] = callback
        return lambda: self.bindings.pop(name, None)

    def on_navigate(self, callback):
        self._navigate_callbacks.append(callback)
        return lambda: self._discard(self._navigate_callbacks, callback)

    def on_context_cleared(self, callback):
        self._cleared_callbacks.append(callback)
        return lambda: self._discard(self._cleared_callbacks, callback)

    @staticmethod
    def _discard(callbacks, callback):
        if callback in callbacks:
            callbacks.remove(callback)

    @property
    def subscriber_count(self):
        return len(self._navigate_callbacks) + len(self._cleared_callbacks)


@pytest.fixture
def fake_page():
    """A fresh page double with no elements."""
    return FakePage()


@pytest.fixture(autouse=True)
def clean_process_state():
    """Process-wide cursor position and animation options start from defaults."""
    cursor_position.reset()
    reset_animation_options()
    yield
    cursor_position.reset()
    reset_animation_options()
