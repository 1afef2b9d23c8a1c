"""Navigation helpers: navigate-with-status, title retrieval and link extraction."""

import logging
from typing import List, Optional
from urllib.parse import urlparse

from playwright.async_api import Page, Response

from ..errors import NavigationError

logger = logging.getLogger(__name__)


HTTP_SCHEMES = ("http", "https")

# Anchor ``href`` properties are absolute URLs already resolved by the browser.
LINK_EXTRACTION_SCRIPT = """
() => Array.from(document.querySelectorAll('a[href]'), a => a.href)
"""


def is_http_url(url: str) -> bool:
    """Check whether a URL uses the http or https scheme."""
    try:
        return urlparse(url).scheme.lower() in HTTP_SCHEMES
    except ValueError:
        return False


async def navigate(page: Page, url: str, timeout_ms: int = 30000) -> Response:
    """Navigate to a URL, waiting only until the DOM is parsed.

    Args:
        page: Page session to navigate
        url: Absolute http(s) URL
        timeout_ms: Navigation timeout in milliseconds

    Returns:
        The main document response

    Raises:
        NavigationError: If the URL is not http(s), navigation throws,
            or no response is returned
    """
    if not is_http_url(url):
        raise NavigationError(url, "URL scheme is not http or https")

    try:
        response: Optional[Response] = await page.goto(
            url,
            wait_until="domcontentloaded",
            timeout=timeout_ms
        )
    except Exception as e:
        raise NavigationError(url, str(e)) from e

    if response is None:
        raise NavigationError(url, "no response returned")

    logger.debug(f"Navigated to {url} (status {response.status})")
    return response


async def get_title(page: Page) -> str:
    """Get the document title, empty if unavailable."""
    try:
        return await page.title()
    except Exception as e:
        logger.debug(f"Could not read title: {e}")
        return ""


async def extract_links(page: Page) -> List[str]:
    """Return outbound anchor URLs in DOM order.

    Duplicates and non-http links are kept; filtering is up to the caller.
    """
    links = await page.evaluate(LINK_EXTRACTION_SCRIPT)
    return [link for link in links or [] if isinstance(link, str) and link]
