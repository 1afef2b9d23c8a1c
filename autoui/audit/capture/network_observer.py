"""Network resource analyzer for per-visit page weight accounting.

The analyzer passively records every response with a positive declared
content length between ``start_listening()`` and ``get_analysis()``. The
analysis also samples CSS rule usage through a Chrome DevTools Protocol
session; browsers without CDP support report 0% unused CSS.
"""

import logging
from typing import Dict, List, Optional

from playwright.async_api import Page, Response

from ..models.result import NetworkAnalysis, ResourceInfo

logger = logging.getLogger(__name__)


TOP_HEAVIEST_COUNT = 5


def size_in_kb(length: int) -> int:
    """Round a byte count to whole kilobytes (half up)."""
    return int((length + 512) // 1024)


def parse_content_length(headers: Dict[str, str]) -> int:
    """Read the declared content length from response headers, 0 if absent."""
    raw = headers.get("content-length")
    if raw is None:
        return 0
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 0


def compute_unused_css_percentage(total_bytes: int, used_bytes: int) -> int:
    """Percentage of stylesheet bytes not covered by used rules.

    Zero total bytes yields 0, and the result is clamped to 0..100.
    """
    if total_bytes <= 0:
        return 0
    unused = (total_bytes - used_bytes) / total_bytes * 100
    return max(0, min(100, round(unused)))


class NetworkAnalyzer:
    """Records resources observed during one page visit and summarizes them."""

    def __init__(self, top_count: int = TOP_HEAVIEST_COUNT):
        self.top_count = top_count
        self.resources: List[ResourceInfo] = []
        self._page: Optional[Page] = None

    @property
    def is_listening(self) -> bool:
        return self._page is not None

    def start_listening(self, page: Page) -> None:
        """Reset the per-visit collection and subscribe to response events."""
        if self._page is not None:
            self.stop_listening()
        self.resources = []
        self._page = page
        page.on("response", self._on_response)
        logger.debug("Network analyzer listening")

    def stop_listening(self) -> None:
        """Unsubscribe from response events. Safe to call more than once."""
        if self._page is None:
            return
        try:
            self._page.remove_listener("response", self._on_response)
        except Exception as e:
            logger.warning(f"Failed to remove response listener: {e}")
        self._page = None
        logger.debug("Network analyzer stopped listening")

    def _on_response(self, response: Response) -> None:
        try:
            length = parse_content_length(response.headers)
            if length <= 0:
                return
            self.resources.append(ResourceInfo(
                url=response.url,
                resource_type=response.request.resource_type,
                size_in_kb=size_in_kb(length),
            ))
        except Exception as e:
            logger.debug(f"Error processing response for network analysis: {e}")

    def summarize(self, unused_css_percentage: int = 0) -> NetworkAnalysis:
        """Summarize recorded resources without touching the page."""
        heaviest = sorted(self.resources, key=lambda r: r.size_in_kb, reverse=True)
        return NetworkAnalysis(
            total_page_weight_kb=sum(r.size_in_kb for r in self.resources),
            total_requests=len(self.resources),
            top_heaviest_resources=heaviest[:self.top_count],
            unused_css_percentage=unused_css_percentage,
        )

    async def get_analysis(self) -> NetworkAnalysis:
        """Stop listening, sample CSS usage and return the visit summary."""
        page = self._page
        self.stop_listening()

        unused_css = 0
        if page is not None:
            unused_css = await self.sample_unused_css(page)

        analysis = self.summarize(unused_css)
        logger.debug(
            f"Network analysis: {analysis.total_requests} requests, "
            f"{analysis.total_page_weight_kb} KB"
        )
        return analysis

    async def sample_unused_css(self, page: Page) -> int:
        """Bracket a CSS rule usage tracking session and compute unused bytes."""
        try:
            session = await page.context.new_cdp_session(page)
        except Exception as e:
            logger.debug(f"CSS coverage unavailable: {e}")
            return 0

        sheet_lengths: Dict[str, float] = {}

        def on_sheet_added(event) -> None:
            header = event.get("header", {})
            sheet_lengths[header.get("styleSheetId")] = header.get("length", 0) or 0

        try:
            session.on("CSS.styleSheetAdded", on_sheet_added)
            await session.send("DOM.enable")
            await session.send("CSS.enable")
            await session.send("CSS.startRuleUsageTracking")
            usage = await session.send("CSS.stopRuleUsageTracking")

            used = sum(
                rule.get("endOffset", 0) - rule.get("startOffset", 0)
                for rule in usage.get("ruleUsage", [])
                if rule.get("used")
            )
            return compute_unused_css_percentage(int(sum(sheet_lengths.values())), int(used))
        except Exception as e:
            logger.debug(f"CSS coverage sampling failed: {e}")
            return 0
        finally:
            try:
                await session.detach()
            except Exception as e:
                logger.debug(f"Failed to detach CDP session: {e}")
