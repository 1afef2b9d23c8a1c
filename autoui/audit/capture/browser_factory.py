"""Browser factory for launching Playwright and opening per-viewport sessions.

The factory owns one Playwright instance and one launched browser. Every
viewport crawl gets its own browser context created from a viewport
profile, so cookies, storage and device emulation never leak between
viewports.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)

from ..models.crawl import ViewportProfile

logger = logging.getLogger(__name__)


class BrowserEngineType:
    """Supported browser engine types."""
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


class BrowserConfig:
    """Configuration for browser launch and context setup."""

    def __init__(
        self,
        engine: str = BrowserEngineType.CHROMIUM,
        headless: bool = True,
        slow_mo: int = 0,
        ignore_https_errors: bool = True,
        user_agent: Optional[str] = None,
        extra_headers: Optional[Dict[str, str]] = None,
        locale: Optional[str] = None,
        **kwargs
    ):
        """Initialize browser configuration.

        Args:
            engine: Browser engine to use (chromium, firefox, webkit)
            headless: Run browser in headless mode
            slow_mo: Slow down operations by specified milliseconds
            ignore_https_errors: Ignore SSL/TLS certificate errors
            user_agent: Custom User-Agent string overriding the device one
            extra_headers: Additional HTTP headers for all requests
            locale: Locale for the browser context
        """
        self.engine = engine
        self.headless = headless
        self.slow_mo = slow_mo
        self.ignore_https_errors = ignore_https_errors
        self.user_agent = user_agent
        self.extra_headers = extra_headers or {}
        self.locale = locale
        self.extra_options = kwargs

    def to_browser_options(self) -> Dict[str, Any]:
        """Convert to Playwright browser launch options."""
        options = {
            'headless': self.headless,
            'slow_mo': self.slow_mo,
        }
        options.update(self.extra_options)
        return options

    def to_context_options(self) -> Dict[str, Any]:
        """Convert to Playwright browser context options shared by all viewports."""
        options: Dict[str, Any] = {}

        if self.ignore_https_errors:
            options['ignore_https_errors'] = True

        if self.user_agent:
            options['user_agent'] = self.user_agent

        if self.extra_headers:
            options['extra_http_headers'] = self.extra_headers

        if self.locale:
            options['locale'] = self.locale

        return options


class BrowserFactory:
    """Factory for creating and managing Playwright browser instances."""

    def __init__(self, config: Optional[BrowserConfig] = None):
        self.config = config or BrowserConfig()
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self._context_count = 0

    async def start(self) -> None:
        """Start Playwright and launch browser."""
        if self.playwright is not None:
            logger.warning("Browser factory already started")
            return

        logger.info(f"Starting browser factory with engine: {self.config.engine}")

        try:
            self.playwright = await async_playwright().start()

            if self.config.engine == BrowserEngineType.FIREFOX:
                browser_type = self.playwright.firefox
            elif self.config.engine == BrowserEngineType.WEBKIT:
                browser_type = self.playwright.webkit
            else:
                browser_type = self.playwright.chromium

            self.browser = await browser_type.launch(**self.config.to_browser_options())
            logger.info(f"Browser launched successfully (headless={self.config.headless})")

        except Exception as e:
            logger.error(f"Failed to start browser: {e}")
            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop browser and cleanup resources."""
        logger.info("Stopping browser factory")

        try:
            if self.browser:
                await self.browser.close()
                self.browser = None

            if self.playwright:
                await self.playwright.stop()
                self.playwright = None

            self._context_count = 0
            logger.info("Browser factory stopped successfully")

        except Exception as e:
            logger.error(f"Error stopping browser factory: {e}")

    def context_options_for(self, profile: ViewportProfile) -> Dict[str, Any]:
        """Build context options emulating a viewport profile.

        Device descriptors come from Playwright's built-in registry. The
        descriptor's ``default_browser_type`` key is not a context option
        and is dropped.

        Args:
            profile: Viewport profile to emulate

        Returns:
            Keyword arguments for ``Browser.new_context``

        Raises:
            KeyError: If the profile names a device Playwright does not know
        """
        options = self.config.to_context_options()

        if profile.device:
            if self.playwright is None:
                raise RuntimeError("Browser factory not started. Call start() first.")
            descriptor = dict(self.playwright.devices[profile.device])
            descriptor.pop('default_browser_type', None)
            if self.config.user_agent:
                descriptor.pop('user_agent', None)
            options.update(descriptor)
        elif profile.viewport:
            options['viewport'] = dict(profile.viewport)

        return options

    async def create_context(self, profile: ViewportProfile) -> BrowserContext:
        """Create a new browser context for a viewport profile.

        Raises:
            RuntimeError: If browser factory not started
        """
        if not self.browser:
            raise RuntimeError("Browser factory not started. Call start() first.")

        context = await self.browser.new_context(**self.context_options_for(profile))
        self._context_count += 1
        logger.debug(f"Created browser context #{self._context_count} for viewport '{profile.name}'")
        return context

    @asynccontextmanager
    async def context(self, profile: ViewportProfile) -> AsyncGenerator[BrowserContext, None]:
        """Context manager for browser context lifecycle.

        Yields:
            Browser context that is closed on exit, whatever the exit path
        """
        context = await self.create_context(profile)
        try:
            yield context
        finally:
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Error closing context for viewport '{profile.name}': {e}")
            self._context_count -= 1

    @asynccontextmanager
    async def page(self, profile: ViewportProfile) -> AsyncGenerator[Page, None]:
        """Context manager for the single page session of one viewport crawl."""
        async with self.context(profile) as context:
            page = await context.new_page()
            try:
                yield page
            finally:
                await page.close()

    @property
    def is_running(self) -> bool:
        return self.browser is not None

    @property
    def context_count(self) -> int:
        """Get current number of open contexts."""
        return self._context_count

    def __repr__(self) -> str:
        return (
            f"BrowserFactory(engine={self.config.engine}, "
            f"headless={self.config.headless}, "
            f"running={self.is_running}, "
            f"contexts={self.context_count})"
        )
