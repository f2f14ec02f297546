"""Router paths of generated page objects.

The generated page-object index registers, per page-object class name, the
router paths that render it::

    register_route_paths({"TenantDetailsPage": ["/tenants/:id"]})

``resolve_route_path`` picks the canonical one and ``fill_route_params``
substitutes ``:name`` segments.
"""

from __future__ import annotations
import logging
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union
from urllib.parse import quote

from .errors import MissingRouteParamError, RouteError

logger = logging.getLogger(__name__)

RouteParamValue = Union[str, int]

_ROUTE_PATHS: Dict[str, Tuple[str, ...]] = {}

# what encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def register_route_paths(paths: Mapping[str, Iterable[str]]) -> None:
    """Add (or replace) the router paths of each named page object."""
    for name, routes in paths.items():
        _ROUTE_PATHS[name] = tuple(routes)
    logger.debug("registered route paths for %d page objects", len(paths))


def clear_route_paths() -> None:
    _ROUTE_PATHS.clear()


def _page_object_name(page_object) -> str:
    return page_object if isinstance(page_object, str) else page_object.__name__


def route_paths_for(page_object) -> Tuple[str, ...]:
    return _ROUTE_PATHS.get(_page_object_name(page_object), ())


def resolve_route_path(page_object) -> str:
    """Canonical router path: parameterless first, then shortest, then alphabetical."""
    name = _page_object_name(page_object)
    if not _ROUTE_PATHS:
        raise RouteError(
            "Route paths are not available; import the generated page-object index first"
        )
    paths = route_paths_for(name)
    if not paths:
        raise RouteError(f"No router path found for component/page-object '{name}'")
    static = [p for p in paths if ":" not in p]
    candidates = static or list(paths)
    return min(candidates, key=lambda p: (len(p), p))


def _is_ident_char(ch: str) -> bool:
    return ch == "_" or ("0" <= ch <= "9") or ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def fill_route_params(
    route_path: str, params: Optional[Mapping[str, RouteParamValue]] = None
) -> str:
    """Replace every ``:name`` with the URI-encoded parameter value.

    A ``:`` not followed by an identifier character is kept literally.
    """
    params = params or {}
    out = []
    i = 0
    length = len(route_path)
    while i < length:
        ch = route_path[i]
        if ch != ":":
            out.append(ch)
            i += 1
            continue
        j = i + 1
        while j < length and _is_ident_char(route_path[j]):
            j += 1
        key = route_path[i + 1 : j]
        if not key:
            out.append(ch)
            i += 1
            continue
        if key not in params or params[key] is None:
            raise MissingRouteParamError(key, route_path)
        out.append(quote(str(params[key]), safe=_URI_COMPONENT_SAFE))
        i = j
    return "".join(out)
