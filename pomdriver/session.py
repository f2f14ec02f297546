from __future__ import annotations
import logging
from typing import Dict, Optional

from .clicks import DEFAULT_CLICK_TIMEOUT_MS, ClickEventSynchronizer
from .config import AnimationSource, get_animation_options
from .cursor.sequencer import DEFAULT_TEST_ID_ATTRIBUTE, CursorSequencer
from .cursor.state import CoordinateCache, cursor_position
from .cursor.telemetry import get_cursor_recorder
from .page import PageLike, PageScript, as_page_script

logger = logging.getLogger(__name__)


class AutomationSession:
    """Per-page owner of the cursor cache, sequencer and click synchronizer.

    Main-frame navigations reset the cursor cache and the sequencer's
    marker flag; the new document has neither.
    """

    def __init__(
        self,
        page: PageLike,
        *,
        cursor: Optional[CoordinateCache] = None,
        strict: bool = True,
        click_timeout_ms: float = DEFAULT_CLICK_TIMEOUT_MS,
        test_id_attribute: str = DEFAULT_TEST_ID_ATTRIBUTE,
        animation_source: AnimationSource = get_animation_options,
    ):
        self.page: PageScript = as_page_script(page)
        self.cursor = cursor if cursor is not None else cursor_position
        self.clicks = ClickEventSynchronizer(
            self.page, strict=strict, default_timeout_ms=click_timeout_ms
        )
        self.sequencer = CursorSequencer(
            self.page,
            clicks=self.clicks,
            cursor=self.cursor,
            animation_source=animation_source,
            test_id_attribute=test_id_attribute,
        )
        self._unsubscribe = self.page.on_navigate(self._on_navigate)

    def _on_navigate(self, url: str) -> None:
        logger.debug("main frame navigated to %s; resetting cursor state", url)
        self.cursor.reset()
        self.sequencer.mark_page_changed()
        get_cursor_recorder(self.page).log_navigation()

    def close(self) -> None:
        """Drop the navigation subscription."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None


def get_session(
    page: PageLike, test_id_attribute: str = DEFAULT_TEST_ID_ATTRIBUTE
) -> AutomationSession:
    """Return the session attached to ``page``, creating it on first use.

    Page objects keyed by different test-id attributes get separate sessions
    on the same page; they share the process-wide cursor cache.
    """
    script = as_page_script(page)
    sessions: Optional[Dict[str, AutomationSession]] = getattr(
        script, "_pomdriver_sessions", None
    )
    if sessions is None:
        sessions = {}
        setattr(script, "_pomdriver_sessions", sessions)
    session = sessions.get(test_id_attribute)
    if session is None:
        session = AutomationSession(script, test_id_attribute=test_id_attribute)
        sessions[test_id_attribute] = session
    return session
