"""pytest fixtures for generated page objects.

Registered through the ``pytest11`` entry point. The project supplies a
``page`` fixture yielding a zendriver tab; ``animation`` and
``pom_base_url`` can be overridden in a ``conftest.py``::

    @pytest.fixture
    def animation():
        return False  # no cursor movement, no typing delay
"""

from __future__ import annotations
import copy
import logging
from typing import Mapping, Optional, Type, TypeVar
from urllib.parse import urljoin

import pytest

from .config import DEFAULT_ANIMATION, reset_animation_options, set_animation_options
from .cursor.state import cursor_position
from .cursor.telemetry import get_cursor_recorder
from .page import PageLike, as_page_script
from .routing import RouteParamValue, fill_route_params, resolve_route_path

logger = logging.getLogger(__name__)

P = TypeVar("P")


class Pom:
    """Creates page objects for one test page and navigates to their routes."""

    def __init__(self, page: PageLike, base_url: str = ""):
        self.page = page
        self.script = as_page_script(page)
        self.base_url = base_url

    def create(self, page_object: Type[P]) -> P:
        return page_object(self.page)

    def url_for(
        self, page_object: Type[P], params: Optional[Mapping[str, RouteParamValue]] = None
    ) -> str:
        path = fill_route_params(resolve_route_path(page_object), params)
        return urljoin(self.base_url, path) if self.base_url else path

    async def goto(
        self, page_object: Type[P], params: Optional[Mapping[str, RouteParamValue]] = None
    ) -> None:
        """Navigate to the canonical router path of ``page_object``."""
        url = self.url_for(page_object, params)
        logger.debug("pom.goto %s -> %s", page_object.__name__, url)
        await self.script.goto(url)

    async def open(self, target, page_object: Optional[Type[P]] = None, *, params=None) -> P:
        """``open(url, PageObject)`` or ``open(PageObject, params=...)``."""
        if isinstance(target, str):
            if page_object is None:
                raise TypeError("pom.open(url, page_object) requires a page-object class")
            await self.script.goto(urljoin(self.base_url, target) if self.base_url else target)
            return self.create(page_object)
        await self.goto(target, params)
        return self.create(target)


@pytest.fixture
def animation():
    """Animation options for the test; ``False`` disables cursor movement."""
    return copy.deepcopy(DEFAULT_ANIMATION)


@pytest.fixture
def pom_base_url() -> str:
    return ""


@pytest.fixture
def pom(page, animation, pom_base_url):
    set_animation_options(animation)
    cursor_position.reset()
    get_cursor_recorder(as_page_script(page)).reset()
    yield Pom(page, pom_base_url)
    reset_animation_options()
