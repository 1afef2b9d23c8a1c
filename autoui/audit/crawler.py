"""Crawl orchestrator for bounded depth-first site traversal.

One ``Crawler`` owns one page session and one visited set, so a crawl per
viewport profile is simply one ``Crawler`` per profile. Traversal uses an
explicit work stack of ``(url, depth)`` pairs instead of call-stack
recursion; children are pushed in reverse so they are explored in DOM order.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Set, Tuple
from urllib.parse import urlparse

from playwright.async_api import Page

from .capture.browser_factory import BrowserFactory
from .capture.navigation import is_http_url
from .errors import PipelineFailure
from .models.crawl import CrawlConfig, CrawlStats, ViewportProfile
from .models.result import FailedPage, PageAudit, PageResult

logger = logging.getLogger(__name__)


class PagePipeline(Protocol):
    """What the orchestrator needs from a per-page audit pipeline."""

    async def run(self, page: Page, url: str, depth: int = 0) -> PageAudit:
        ...

    async def recover_links(self, page: Page, url: str) -> List[str]:
        ...


def has_excluded_extension(url: str, extensions: Iterable[str]) -> bool:
    """Check the URL path (not query or fragment) against excluded extensions."""
    path = urlparse(url).path.lower()
    return any(path.endswith(f".{ext}") for ext in extensions)


class Crawler:
    """Bounded depth-first crawl of one site under one viewport."""

    def __init__(
        self,
        pipeline: PagePipeline,
        page: Page,
        viewport: str,
        config: Optional[CrawlConfig] = None
    ):
        """Initialize crawler.

        Args:
            pipeline: Per-page audit pipeline
            page: The page session every URL of this crawl is audited on
            viewport: Viewport name results are tagged with
            config: Crawl configuration, validated once here
        """
        self.pipeline = pipeline
        self.page = page
        self.viewport = viewport
        self.config = config if config is not None else CrawlConfig()

        self.visited: Set[str] = set()
        self.results: List[PageResult] = []
        self.stats = CrawlStats(viewport=viewport)

    def select_links(self, links: Sequence[str]) -> List[str]:
        """Filter candidate links, then truncate to the per-page budget.

        Filtering happens before truncation so excluded or visited links
        never consume the budget. Repeated links on one page count once.
        """
        selected: List[str] = []
        seen: Set[str] = set()

        for link in links:
            if (
                link in self.visited
                or link in seen
                or not is_http_url(link)
                or has_excluded_extension(link, self.config.excluded_extensions)
            ):
                self.stats.links_skipped += 1
                continue
            seen.add(link)
            selected.append(link)

        return selected[:self.config.max_links_per_page]

    async def crawl(self, seed_url: str) -> List[PageResult]:
        """Crawl from a seed URL and return the results of this crawl."""
        self.stats.start_time = datetime.utcnow()
        logger.info(
            f"[{self.viewport}] Starting crawl of {seed_url} "
            f"(max_depth={self.config.max_depth}, max_links={self.config.max_links_per_page})"
        )
        try:
            await self.explore(seed_url, 0)
        finally:
            self.stats.end_time = datetime.utcnow()
            logger.info(f"[{self.viewport}] Crawl finished: {self.stats.export_summary()}")
        return self.results

    async def explore(self, url: str, depth: int = 0) -> None:
        """Explore ``url`` and everything reachable from it within the bounds.

        Already visited URLs and URLs deeper than ``max_depth`` are ignored.
        """
        stack: List[Tuple[str, int]] = [(url, depth)]

        while stack:
            current, current_depth = stack.pop()
            if current in self.visited or current_depth > self.config.max_depth:
                continue

            # Marked before the audit so rediscovery while in flight is a no-op.
            self.visited.add(current)

            result, links = await self._process(current, current_depth)
            self.results.append(result)

            if current_depth >= self.config.max_depth:
                continue

            self.stats.links_discovered += len(links)
            children = self.select_links(links)
            for child in reversed(children):
                stack.append((child, current_depth + 1))

    async def _process(self, url: str, depth: int) -> Tuple[PageResult, List[str]]:
        self.stats.pages_attempted += 1
        deadline = self.config.page_deadline_seconds

        try:
            run = self.pipeline.run(self.page, url, depth)
            if deadline is not None:
                audit = await asyncio.wait_for(run, timeout=deadline)
            else:
                audit = await run
        except asyncio.TimeoutError:
            reason = f"page audit exceeded the {deadline:g}s deadline"
        except Exception as e:
            reason = str(e) or type(e).__name__
        else:
            self.stats.pages_succeeded += 1
            return audit, list(audit.discovered_links)

        self.stats.pages_failed += 1
        failure = PipelineFailure(url, reason)
        logger.error(f"[{self.viewport}] {failure}")
        failed = FailedPage(url=url, viewport=self.viewport, depth=depth, reason=reason)
        # A hung page would block recovery as well, so it shares the deadline.
        try:
            recovery = self.pipeline.recover_links(self.page, url)
            if deadline is not None:
                links = await asyncio.wait_for(recovery, timeout=deadline)
            else:
                links = await recovery
        except Exception as e:
            logger.debug(f"Could not recover links from {url}: {e}")
            links = []
        return failed, links


PipelineFactory = Callable[[ViewportProfile], PagePipeline]


async def crawl_viewport(
    factory: BrowserFactory,
    profile: ViewportProfile,
    seed_url: str,
    pipeline_factory: PipelineFactory,
    config: Optional[CrawlConfig] = None
) -> List[PageResult]:
    """Run one independent crawl in a fresh context for ``profile``.

    The context and page are released however the traversal ends.
    """
    logger.info(f"Running crawl for viewport: {profile.name}")
    async with factory.page(profile) as page:
        crawler = Crawler(pipeline_factory(profile), page, profile.name, config)
        return await crawler.crawl(seed_url)


async def crawl_viewports(
    factory: BrowserFactory,
    profiles: Sequence[ViewportProfile],
    seed_url: str,
    pipeline_factory: PipelineFactory,
    config: Optional[CrawlConfig] = None,
    parallel: bool = False
) -> List[PageResult]:
    """Crawl the seed once per viewport and concatenate results in profile order.

    Concatenation only happens after every viewport run has finished. A
    viewport whose browser context cannot be created contributes no results
    and does not stop the others.
    """
    runs = [
        crawl_viewport(factory, profile, seed_url, pipeline_factory, config)
        for profile in profiles
    ]

    if parallel:
        outcomes = await asyncio.gather(*runs, return_exceptions=True)
    else:
        outcomes = []
        for run in runs:
            try:
                outcomes.append(await run)
            except Exception as e:
                outcomes.append(e)

    results: List[PageResult] = []
    for profile, outcome in zip(profiles, outcomes):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.error(f"Viewport '{profile.name}' crawl failed: {outcome}")
            continue
        results.extend(outcome)
    return results

