"""Per-page audit pipeline.

For one URL the pipeline attaches its passive listeners, navigates, runs the
interaction engine and every probe concurrently, then finalizes network
analysis and assembles a ``PageAudit``.

All six concurrent operations share the one Playwright page. Playwright tags
every protocol command with its own id and resolves replies independently,
so concurrent dispatch on a single page is safe to interleave; the operations
are therefore not serialized.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from playwright.async_api import Page

from .capture.monitor import PageMonitor
from .capture.navigation import extract_links, get_title, navigate
from .capture.network_observer import NetworkAnalyzer
from .capture.screenshot import capture_screenshot
from .errors import ProbeFailure
from .explorer.engine import HeuristicExplorer
from .models.crawl import CrawlConfig
from .models.result import PageAudit
from .probes.accessibility import AccessibilityProbe
from .probes.content_seo import ContentSeoProbe
from .probes.performance import collect_performance
from .probes.security import audit_security

logger = logging.getLogger(__name__)


class AuditPipeline:
    """Produces exactly one ``PageAudit`` for one URL on one page session."""

    def __init__(
        self,
        viewport: str,
        screenshot_dir: Path,
        crawl_config: Optional[CrawlConfig] = None,
        explorer: Optional[HeuristicExplorer] = None,
        accessibility_probe: Optional[AccessibilityProbe] = None,
        seo_probe: Optional[ContentSeoProbe] = None
    ):
        """Initialize pipeline.

        Args:
            viewport: Viewport name results are tagged with
            screenshot_dir: Directory screenshots are written to
            crawl_config: Crawl configuration (navigation timeout)
            explorer: Heuristic interaction engine
            accessibility_probe: Accessibility probe
            seo_probe: Content/SEO probe
        """
        self.viewport = viewport
        self.screenshot_dir = Path(screenshot_dir)
        self.crawl_config = crawl_config or CrawlConfig()
        self.explorer = explorer or HeuristicExplorer()
        self.accessibility_probe = accessibility_probe or AccessibilityProbe()
        self.seo_probe = seo_probe or ContentSeoProbe()

    def _probe_tasks(self, page: Page, response) -> Dict[str, Any]:
        return {
            "performance": collect_performance(page),
            "screenshot_path": capture_screenshot(page, self.screenshot_dir, self.viewport),
            "accessibility": self.accessibility_probe.scan(page),
            "interactions": self.explorer.explore(page),
            "security": audit_security(page, response),
            "seo": self.seo_probe.audit(page),
        }

    async def run(self, page: Page, url: str, depth: int = 0) -> PageAudit:
        """Audit one URL.

        Raises:
            NavigationError: If the page cannot be established. Probe
                failures never propagate; they are recorded on the result.
        """
        logger.info(f"[{self.viewport}] Auditing {url} (depth {depth})")

        monitor = PageMonitor(page)
        analyzer = NetworkAnalyzer()

        # Listening must precede navigation to see the document response.
        monitor.attach()
        analyzer.start_listening(page)
        try:
            response = await navigate(page, url, self.crawl_config.navigation_timeout_ms)
            title = await get_title(page)

            tasks = self._probe_tasks(page, response)
            outcomes = await asyncio.gather(*tasks.values(), return_exceptions=True)

            fields: Dict[str, Any] = {}
            probe_errors: Dict[str, str] = {}
            for name, outcome in zip(tasks, outcomes):
                if isinstance(outcome, Exception):
                    failure = ProbeFailure(name, url, outcome)
                    logger.warning(str(failure))
                    probe_errors[name] = str(outcome) or type(outcome).__name__
                    fields[name] = None
                elif isinstance(outcome, BaseException):
                    raise outcome
                else:
                    fields[name] = outcome

            # Runs after the probes so resources triggered by interactions count.
            network = await analyzer.get_analysis()

            discovered_links: List[str] = []
            try:
                discovered_links = await extract_links(page)
            except Exception as e:
                logger.warning(f"Link extraction failed for {url}: {e}")
                probe_errors["links"] = str(e)

        finally:
            analyzer.stop_listening()
            monitor.detach()

        return PageAudit(
            url=url,
            viewport=self.viewport,
            depth=depth,
            title=title,
            http_status=response.status,
            console_messages=list(monitor.console_messages),
            failed_requests=list(monitor.failed_requests),
            network=network,
            discovered_links=discovered_links,
            probe_errors=probe_errors,
            **fields,
        )

    async def recover_links(self, page: Page, url: str) -> List[str]:
        """Best-effort link list after a failed audit.

        Links are only trusted while the page still shows ``url``.
        """
        if page.url != url:
            return []
        try:
            return await extract_links(page)
        except Exception as e:
            logger.debug(f"Could not recover links from {url}: {e}")
            return []
