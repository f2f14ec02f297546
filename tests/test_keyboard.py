"""Tests for paced typing."""

from unittest.mock import AsyncMock

import pytest

from pomdriver.config import set_animation_options
from pomdriver.keyboard import behaviors, fill, press_key, resolve_type_delay_ms, type_text
from pomdriver.keyboard.config import kcfg


@pytest.fixture
def sleeps(monkeypatch):
    """Record typing pauses instead of sleeping."""
    mock = AsyncMock()
    monkeypatch.setattr(behaviors, "sleep_ms", mock)
    return mock


class TestTypeText:
    """Tests for type_text."""

    @pytest.mark.asyncio
    async def test_each_character_with_configured_delay(self, fake_page, sleeps):
        set_animation_options({"keyboard": {"type_delay_ms": 80}})
        await type_text(fake_page, "abc")
        assert fake_page.inputs == ["insertText"] * 3
        assert [call.args[0] for call in sleeps.await_args_list] == [80.0, 80.0]

    @pytest.mark.asyncio
    async def test_zero_delay_inserts_at_once(self, fake_page, sleeps):
        set_animation_options(False)
        await type_text(fake_page, "Acme Corp")
        assert fake_page.inputs == ["insertText"]
        sleeps.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_explicit_delay_overrides_config(self, fake_page, sleeps):
        await type_text(fake_page, "ab", delay_ms=5)
        assert sleeps.await_args_list[0].args[0] == 5.0

    @pytest.mark.asyncio
    async def test_newline_is_sent_as_enter(self, fake_page, sleeps):
        await type_text(fake_page, "a\nb", delay_ms=0)
        assert fake_page.inputs == ["insertText", "EnterDown", "EnterUp", "insertText"]

    @pytest.mark.asyncio
    async def test_empty_text_sends_nothing(self, fake_page, sleeps):
        await type_text(fake_page, "")
        assert fake_page.inputs == []

    def test_delay_is_capped(self):
        set_animation_options({"keyboard": {"type_delay_ms": 50_000}})
        assert resolve_type_delay_ms() == kcfg.MAX_TYPE_DELAY_MS


class TestFillAndKeys:
    """Tests for fill and press_key."""

    @pytest.mark.asyncio
    async def test_fill_focuses_and_clears_first(self, fake_page, sleeps):
        fake_page.add_element("#name")
        await fill(fake_page, "#name", "x")
        assert fake_page.focused == [("#name", True)]
        assert fake_page.inputs == ["insertText"]

    @pytest.mark.asyncio
    async def test_press_key(self, fake_page):
        await press_key(fake_page, "Escape")
        assert fake_page.inputs == ["EscapeDown", "EscapeUp"]

    @pytest.mark.asyncio
    async def test_unknown_key(self, fake_page):
        with pytest.raises(ValueError, match="Unsupported key"):
            await press_key(fake_page, "Hyper")
