from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from .cursor.sequencer import DEFAULT_TEST_ID_ATTRIBUTE, ClickInfo
from .fluent import ChainHandle, start_chain, value_returning
from .identifiers import DEFAULT_EXTRACT_TIMEOUT_MS, Identifier
from .identifiers import extract_identifier as _extract_identifier
from .page import PageLike, PageScript, as_page_script, selector_for_attribute
from .session import AutomationSession, get_session
from .utils import sleep_ms

logger = logging.getLogger(__name__)

T = TypeVar("T")

VSELECT_OPTION_SELECTOR = "ul.vs__dropdown-menu li[role='option']"


@dataclass(frozen=True)
class Locator:
    """A CSS selector bound to the page object that drives it."""

    owner: "BasePage"
    selector: str

    def __str__(self) -> str:
        return self.selector

    def child(self, selector: str) -> "Locator":
        return Locator(self.owner, f"{self.selector} {selector}")

    async def click(self, annotation: str = "", wait: bool = True) -> ClickInfo:
        return await self.owner.click_selector(self.selector, annotation, wait)

    async def fill(self, text: str, annotation: str = "") -> ClickInfo:
        return await self.owner.fill_input_by_selector(self.selector, text, annotation)

    async def hover(self, annotation: str = "") -> ClickInfo:
        return await self.owner.session.sequencer.hover(self.selector, annotation=annotation)

    async def is_visible(self) -> bool:
        return await self.owner.page.exists(self.selector, visible=True)

    async def text_content(self) -> Optional[str]:
        return await self.owner.page.text_content(self.selector)

    async def get_attribute(self, name: str) -> Optional[str]:
        return await self.owner.page.get_attribute(self.selector, name)

    async def wait_for(self, timeout_ms: float = 3000.0) -> None:
        await self.owner.page.wait_for_selector(self.selector, timeout_ms=timeout_ms, visible=True)


class KeyedElements(Generic[T]):
    """Indexable family of elements, e.g. ``page.SaveButton["MyKey"]``."""

    def __init__(self, resolve: Callable[[str], T]):
        self._resolve = resolve

    def __getitem__(self, key: Any) -> T:
        return self._resolve(str(key))


class BasePage:
    """Base class of generated page objects.

    Elements are addressed by a stable test-id attribute (``data-testid`` by
    default). Every click goes through the cursor sequencer; clicks on
    instrumented elements wait for the page to report that the handler
    finished.
    """

    def __init__(
        self,
        page: PageLike,
        test_id_attribute: str = DEFAULT_TEST_ID_ATTRIBUTE,
        *,
        session: Optional[AutomationSession] = None,
    ):
        self.page: PageScript = as_page_script(page)
        self.test_id_attribute = (test_id_attribute or "").strip() or DEFAULT_TEST_ID_ATTRIBUTE
        self.session = session if session is not None else get_session(
            self.page, self.test_id_attribute
        )

    # selectors

    def selector_for_test_id(self, test_id: str) -> str:
        return selector_for_attribute(self.test_id_attribute, test_id)

    def locator_by_test_id(self, test_id: str) -> Locator:
        return Locator(self, self.selector_for_test_id(test_id))

    def keyed_elements(self, resolve: Callable[[str], T]) -> KeyedElements[T]:
        return KeyedElements(resolve)

    def keyed_test_ids(self, template: str) -> KeyedElements[Locator]:
        """Locators for ids built from ``template``, e.g. ``"row-{key}-delete"``."""
        return KeyedElements(lambda key: self.locator_by_test_id(template.format(key=key)))

    # chains

    def fluent(self, factory: Callable[[], Any]) -> ChainHandle:
        return start_chain(factory)

    @value_returning
    async def extract_identifier(self, timeout_ms: float = DEFAULT_EXTRACT_TIMEOUT_MS) -> Identifier:
        return await _extract_identifier(self.page, timeout_ms)

    @value_returning
    async def extract_identifier_as_int(self, timeout_ms: float = DEFAULT_EXTRACT_TIMEOUT_MS) -> int:
        identifier = await self.extract_identifier(timeout_ms)
        return identifier.as_int()

    # interactions

    async def click_selector(self, selector: str, annotation: str = "", wait: bool = True) -> ClickInfo:
        return await self.session.sequencer.move_and_optionally_click(
            selector, annotation=annotation, wait_for_confirmation=wait
        )

    async def click_by_test_id(self, test_id: str, annotation: str = "", wait: bool = True) -> ClickInfo:
        return await self.click_selector(self.selector_for_test_id(test_id), annotation, wait)

    async def click_locator(self, locator: Locator, annotation: str = "", wait: bool = True) -> ClickInfo:
        return await self.click_selector(locator.selector, annotation, wait)

    async def click_by_aria_label(self, aria_label: str, annotation: str = "") -> ClickInfo:
        return await self.click_selector(selector_for_attribute("aria-label", aria_label), annotation)

    async def fill_input_by_selector(self, selector: str, text: str, annotation: str = "") -> ClickInfo:
        return await self.session.sequencer.move_click_and_fill(selector, text, annotation=annotation)

    async def fill_input_by_test_id(self, test_id: str, text: str, annotation: str = "") -> ClickInfo:
        return await self.fill_input_by_selector(self.selector_for_test_id(test_id), text, annotation)

    async def fill_input_by_locator(self, locator: Locator, text: str, annotation: str = "") -> ClickInfo:
        return await self.fill_input_by_selector(locator.selector, text, annotation)

    async def type_by_test_id(self, test_id: str, text: str) -> ClickInfo:
        return await self.fill_input_by_test_id(test_id, text)

    async def select_vselect_by_test_id(
        self, test_id: str, value: str, timeout_ms: float = 500.0, annotation: str = ""
    ) -> None:
        """Type into a vue-select rooted at ``test_id`` and pick the first match."""
        root = self.selector_for_test_id(test_id)
        search = f"{root} input"
        await self.session.sequencer.move_click_and_fill(
            search, value, annotation=annotation, wait_for_confirmation=False
        )
        await sleep_ms(timeout_ms)
        option = f"{root} {VSELECT_OPTION_SELECTOR}"
        if await self.page.exists(option):
            await self.click_selector(option, annotation)
        else:
            logger.debug("no vue-select option for %r in %s", value, root)

    async def hover_by_test_id(self, test_id: str, annotation: str = "") -> ClickInfo:
        return await self.session.sequencer.hover(
            self.selector_for_test_id(test_id), annotation=annotation
        )

    async def select_by_test_id(self, test_id: str, value: str) -> None:
        await self.page.select_option(self.selector_for_test_id(test_id), value)

    # queries

    async def is_visible_by_test_id(self, test_id: str) -> bool:
        return await self.page.exists(self.selector_for_test_id(test_id), visible=True)

    async def get_text_by_test_id(self, test_id: str) -> Optional[str]:
        return await self.page.text_content(self.selector_for_test_id(test_id))

    async def wait_for_test_id(self, test_id: str, timeout_ms: float = 3000.0) -> None:
        await self.page.wait_for_selector(
            self.selector_for_test_id(test_id), timeout_ms=timeout_ms, visible=True
        )
