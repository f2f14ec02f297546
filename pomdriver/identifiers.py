from __future__ import annotations
import logging
import re
import time

from .errors import IdentifierTimeoutError, MalformedIdentifierError, PageScriptError
from .page import PageScript
from .utils import sleep_ms

logger = logging.getLogger(__name__)

MAX_SAFE_INTEGER = 2**53 - 1

# first digit run that is a whole path segment: /123, /123/, /123?x, /123#y
_URL_ID_RE = re.compile(r"/([0-9]+)(?:[/?#]|$)")
_DIGITS_RE = re.compile(r"[0-9]+")

DEFAULT_EXTRACT_TIMEOUT_MS = 10_000
EXTRACT_POLL_INTERVAL_MS = 50


class Identifier:
    """A non-empty textual id, typically taken from the page URL."""

    __slots__ = ("raw",)

    def __init__(self, raw: str):
        raw = "" if raw is None else str(raw)
        if not raw:
            raise MalformedIdentifierError("Identifier: raw value is empty")
        self.raw = raw

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:
        return f"Identifier({self.raw!r})"

    def __eq__(self, other) -> bool:
        if isinstance(other, Identifier):
            return self.raw == other.raw
        if isinstance(other, str):
            return self.raw == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.raw)

    def as_int(self) -> int:
        """Only plain base-10 digit strings within the safe-integer range convert."""
        if not _DIGITS_RE.fullmatch(self.raw):
            raise MalformedIdentifierError(
                f"Identifier.as_int: '{self.raw}' is not a base-10 integer string"
            )
        value = int(self.raw, 10)
        if value > MAX_SAFE_INTEGER:
            raise MalformedIdentifierError(
                f"Identifier.as_int: '{self.raw}' is not a safe integer"
            )
        return value


def find_identifier(url: str):
    """Return the Identifier embedded in ``url`` or None."""
    match = _URL_ID_RE.search(url or "")
    return Identifier(match.group(1)) if match else None


async def extract_identifier(
    page: PageScript,
    timeout_ms: float = DEFAULT_EXTRACT_TIMEOUT_MS,
    *,
    poll_interval_ms: float = EXTRACT_POLL_INTERVAL_MS,
) -> Identifier:
    """Poll the page URL until it carries a numeric path segment.

    A read that fails mid-navigation counts as "no id yet"; the timeout
    message carries the last URL that could be read.
    """
    deadline = time.monotonic() + timeout_ms / 1000.0
    url = ""
    while True:
        try:
            url = await page.url()
        except PageScriptError as exc:
            logger.debug("extract_identifier: url unreadable, retrying (%s)", exc)
        else:
            identifier = find_identifier(url)
            if identifier is not None:
                return identifier
        if time.monotonic() >= deadline:
            raise IdentifierTimeoutError(url, timeout_ms)
        await sleep_ms(poll_interval_ms)


async def extract_identifier_as_int(
    page: PageScript, timeout_ms: float = DEFAULT_EXTRACT_TIMEOUT_MS, **kwargs
) -> int:
    identifier = await extract_identifier(page, timeout_ms, **kwargs)
    return identifier.as_int()
