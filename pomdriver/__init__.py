from .base_page import BasePage, KeyedElements, Locator
from .clicks import (
    TESTID_CLICK_EVENT_NAME,
    TESTID_CLICK_EVENT_STRICT_FLAG,
    ClickEvent,
    ClickEventSynchronizer,
    ClickWait,
)
from .config import (
    DEFAULT_ANIMATION,
    AnimationSettings,
    get_animation_options,
    reset_animation_options,
    resolve_animation,
    set_animation_options,
)
from .cursor import ClickInfo, CoordinateCache, CursorSequencer, cursor_position
from .errors import (
    AnimationTimeoutError,
    ClickHandlerError,
    ClickTimeoutError,
    ContextDestroyedError,
    ElementNotFoundError,
    IdentifierTimeoutError,
    MalformedIdentifierError,
    MissingMemberError,
    MissingRouteParamError,
    NotCallableError,
    PageScriptError,
    PomDriverError,
    RouteError,
)
from .fluent import (
    ActionQueue,
    ChainHandle,
    MemberHandle,
    ValueHandle,
    register_value_returning,
    start_chain,
    value_returning,
)
from .identifiers import Identifier, extract_identifier, extract_identifier_as_int
from .page import PageScript
from .routing import fill_route_params, register_route_paths, resolve_route_path
from .session import AutomationSession, get_session

__all__ = [
    "BasePage",
    "KeyedElements",
    "Locator",
    "TESTID_CLICK_EVENT_NAME",
    "TESTID_CLICK_EVENT_STRICT_FLAG",
    "ClickEvent",
    "ClickEventSynchronizer",
    "ClickWait",
    "DEFAULT_ANIMATION",
    "AnimationSettings",
    "get_animation_options",
    "reset_animation_options",
    "resolve_animation",
    "set_animation_options",
    "ClickInfo",
    "CoordinateCache",
    "CursorSequencer",
    "cursor_position",
    "AnimationTimeoutError",
    "ClickHandlerError",
    "ClickTimeoutError",
    "ContextDestroyedError",
    "ElementNotFoundError",
    "IdentifierTimeoutError",
    "MalformedIdentifierError",
    "MissingMemberError",
    "MissingRouteParamError",
    "NotCallableError",
    "PageScriptError",
    "PomDriverError",
    "RouteError",
    "ActionQueue",
    "ChainHandle",
    "MemberHandle",
    "ValueHandle",
    "register_value_returning",
    "start_chain",
    "value_returning",
    "Identifier",
    "extract_identifier",
    "extract_identifier_as_int",
    "PageScript",
    "fill_route_params",
    "register_route_paths",
    "resolve_route_path",
    "AutomationSession",
    "get_session",
]
