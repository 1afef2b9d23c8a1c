"""Console and failed-request monitoring for a single page visit.

Listeners are an explicit scoped resource: ``attach()`` registers them on the
page and ``detach()`` removes them. ``PageMonitor`` is also a context manager
so the pipeline can guarantee detachment on every exit path.
"""

import logging
from typing import List

from playwright.async_api import ConsoleMessage as PlaywrightConsoleMessage
from playwright.async_api import Page, Response

from ..models.result import ConsoleMessage, FailedRequest

logger = logging.getLogger(__name__)


class PageMonitor:
    """Collects console messages and non-200 responses during one page visit."""

    def __init__(self, page: Page):
        self.page = page
        self.console_messages: List[ConsoleMessage] = []
        self.failed_requests: List[FailedRequest] = []
        self._attached = False

    def attach(self) -> None:
        """Reset collections and register listeners."""
        if self._attached:
            return
        self.console_messages = []
        self.failed_requests = []
        self.page.on("console", self._on_console)
        self.page.on("response", self._on_response)
        self._attached = True
        logger.debug("Page monitor listeners attached")

    def detach(self) -> None:
        """Remove listeners. Safe to call more than once."""
        if not self._attached:
            return
        for event, handler in (("console", self._on_console), ("response", self._on_response)):
            try:
                self.page.remove_listener(event, handler)
            except Exception as e:
                logger.warning(f"Failed to remove {event} listener: {e}")
        self._attached = False
        logger.debug("Page monitor listeners detached")

    def __enter__(self) -> "PageMonitor":
        self.attach()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.detach()

    def _on_console(self, message: PlaywrightConsoleMessage) -> None:
        try:
            self.console_messages.append(ConsoleMessage.from_playwright_message(message))
        except Exception as e:
            logger.debug(f"Error processing console message: {e}")

    def _on_response(self, response: Response) -> None:
        try:
            if response.status != 200:
                self.failed_requests.append(
                    FailedRequest(url=response.url, status=response.status)
                )
        except Exception as e:
            logger.debug(f"Error processing response: {e}")
