"""Unit tests for browser factory and viewport profiles."""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from autoui.audit.capture.browser_factory import BrowserConfig, BrowserEngineType, BrowserFactory
from autoui.audit.capture.viewports import (
    VIEWPORT_PROFILES,
    get_viewport,
    parse_viewport_list,
    resolve_viewports,
)
from autoui.audit.errors import UnknownViewportError
from autoui.audit.models import ViewportProfile

IPHONE = {
    "user_agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 15_0 like Mac OS X)",
    "viewport": {"width": 390, "height": 664},
    "device_scale_factor": 3,
    "is_mobile": True,
    "has_touch": True,
    "default_browser_type": "webkit",
}


class TestBrowserConfig:
    """Test BrowserConfig class."""

    def test_default_config(self):
        config = BrowserConfig()

        assert config.engine == BrowserEngineType.CHROMIUM
        assert config.headless is True
        assert config.to_context_options() == {"ignore_https_errors": True}

    def test_browser_options(self):
        config = BrowserConfig(headless=False, slow_mo=100, devtools=True)

        assert config.to_browser_options() == {"headless": False, "slow_mo": 100, "devtools": True}

    def test_context_options(self):
        config = BrowserConfig(
            ignore_https_errors=False,
            user_agent="autoui/1.0",
            extra_headers={"X-Test": "1"},
            locale="pl-PL",
        )

        assert config.to_context_options() == {
            "user_agent": "autoui/1.0",
            "extra_http_headers": {"X-Test": "1"},
            "locale": "pl-PL",
        }


class TestBrowserFactory:
    """Test BrowserFactory class."""

    @pytest.fixture
    def factory(self):
        factory = BrowserFactory()
        factory.playwright = MagicMock()
        factory.playwright.devices = {"iPhone 13 Pro": IPHONE}
        return factory

    def test_desktop_profile_sets_viewport(self, factory):
        options = factory.context_options_for(VIEWPORT_PROFILES["desktop"])

        assert options["viewport"] == {"width": 1920, "height": 1080}
        assert options["ignore_https_errors"] is True

    def test_device_profile_uses_descriptor(self, factory):
        options = factory.context_options_for(VIEWPORT_PROFILES["mobile"])

        assert options["is_mobile"] is True
        assert options["viewport"] == {"width": 390, "height": 664}
        assert "default_browser_type" not in options
        assert "default_browser_type" in IPHONE

    def test_configured_user_agent_wins(self, factory):
        factory.config = BrowserConfig(user_agent="autoui/1.0")

        options = factory.context_options_for(VIEWPORT_PROFILES["mobile"])

        assert options["user_agent"] == "autoui/1.0"

    def test_unknown_device(self, factory):
        with pytest.raises(KeyError):
            factory.context_options_for(ViewportProfile(name="watch", device="Apple Watch"))

    def test_device_before_start(self):
        with pytest.raises(RuntimeError, match="not started"):
            BrowserFactory().context_options_for(VIEWPORT_PROFILES["mobile"])

    @pytest.mark.asyncio
    async def test_create_context_requires_start(self):
        with pytest.raises(RuntimeError, match="not started"):
            await BrowserFactory().create_context(VIEWPORT_PROFILES["desktop"])

    @pytest.mark.asyncio
    async def test_page_session_closes_context(self, factory):
        context = MagicMock()
        context.new_page = AsyncMock(return_value=MagicMock(close=AsyncMock()))
        context.close = AsyncMock()
        factory.browser = MagicMock()
        factory.browser.new_context = AsyncMock(return_value=context)

        with pytest.raises(ValueError):
            async with factory.page(VIEWPORT_PROFILES["desktop"]) as page:
                assert factory.context_count == 1
                raise ValueError("crawl blew up")

        page.close.assert_awaited_once()
        context.close.assert_awaited_once()
        assert factory.context_count == 0
        factory.browser.new_context.assert_awaited_once_with(
            ignore_https_errors=True, viewport={"width": 1920, "height": 1080}
        )

    @pytest.mark.asyncio
    async def test_start_selects_engine(self):
        playwright = MagicMock()
        playwright.firefox.launch = AsyncMock(return_value=MagicMock())
        starter = MagicMock()
        starter.start = AsyncMock(return_value=playwright)

        with patch("autoui.audit.capture.browser_factory.async_playwright", return_value=starter):
            factory = BrowserFactory(BrowserConfig(engine=BrowserEngineType.FIREFOX))
            await factory.start()

        playwright.firefox.launch.assert_awaited_once_with(headless=True, slow_mo=0)
        assert factory.is_running

    @pytest.mark.asyncio
    async def test_stop_resets_state(self, factory):
        factory.browser = MagicMock(close=AsyncMock())
        factory.playwright.stop = AsyncMock()

        await factory.stop()

        assert not factory.is_running
        assert factory.playwright is None


class TestViewports:
    """Tests for the viewport registry."""

    def test_registry(self):
        assert VIEWPORT_PROFILES["desktop"].viewport == {"width": 1920, "height": 1080}
        assert VIEWPORT_PROFILES["mobile"].device == "iPhone 13 Pro"
        assert VIEWPORT_PROFILES["tablet"].device == "iPad Pro 11"

    def test_parse_list(self):
        assert parse_viewport_list(" Desktop, ,mobile ") == ["desktop", "mobile"]

    def test_get_unknown(self):
        with pytest.raises(UnknownViewportError, match="watch"):
            get_viewport("watch")

    def test_resolve_skips_unknown(self, caplog):
        with caplog.at_level(logging.WARNING):
            profiles = resolve_viewports(["tablet", "watch", "desktop", "tablet"])

        assert [p.name for p in profiles] == ["tablet", "desktop"]
        assert "Unknown viewport name: watch" in caplog.text
