from __future__ import annotations
from typing import Optional


class PomDriverError(Exception):
    """Base class for every failure raised by pomdriver."""


class MissingMemberError(PomDriverError, AttributeError):
    """A chain addressed a member the resolved object does not have."""

    def __init__(self, member: str, owner: str):
        super().__init__(f"Fluent: '{member}' does not exist on {owner}")
        self.member = member
        self.owner = owner


class NotCallableError(PomDriverError, TypeError):
    """A chain invoked a member that is not a function."""

    def __init__(self, member: str, owner: str):
        super().__init__(f"Fluent: '{member}' is not a function on {owner}")
        self.member = member
        self.owner = owner


class ClickHandlerError(PomDriverError):
    """The page reported that a click handler failed."""

    def __init__(self, test_id: str, message: Optional[str] = None):
        super().__init__(message or f"Click handler failed for {test_id}")
        self.test_id = test_id


class ClickTimeoutError(PomDriverError, TimeoutError):
    def __init__(self, event_name: str, test_id: str, timeout_ms: float):
        super().__init__(
            f"Timed out waiting for {event_name} 'after' for '{test_id}' "
            f"({timeout_ms:.0f}ms)"
        )
        self.test_id = test_id
        self.timeout_ms = timeout_ms


class IdentifierTimeoutError(PomDriverError, TimeoutError):
    def __init__(self, url: str, timeout_ms: float):
        super().__init__(
            f"extract_identifier: could not find a numeric id in url '{url}' "
            f"within {timeout_ms:.0f}ms"
        )
        self.url = url
        self.timeout_ms = timeout_ms


class MalformedIdentifierError(PomDriverError, ValueError):
    """Identifier is empty, not a base-10 integer, or outside the safe range."""


class AnimationTimeoutError(PomDriverError, TimeoutError):
    """The page never acknowledged a cursor transition."""


class PageScriptError(PomDriverError):
    """An in-page script threw, or a CDP command failed."""


class ContextDestroyedError(PageScriptError):
    """The page's execution context went away (navigation, closed target)."""


class ElementNotFoundError(PageScriptError):
    def __init__(self, selector: str, timeout_ms: Optional[float] = None):
        msg = f"Element not found for selector: {selector!r}"
        if timeout_ms is not None:
            msg += f" (waited {timeout_ms:.0f}ms)"
        super().__init__(msg)
        self.selector = selector


class RouteError(PomDriverError, LookupError):
    """No router path is registered for a page object."""


class MissingRouteParamError(RouteError):
    def __init__(self, param: str, path: str):
        super().__init__(f"Missing route param :{param} for path {path}")
        self.param = param
        self.path = path
