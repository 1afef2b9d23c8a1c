"""Shared test fixtures and configuration for autoui tests."""

from contextlib import asynccontextmanager
from typing import Dict, Iterable, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from autoui.audit.errors import NavigationError
from autoui.audit.models.crawl import CrawlConfig
from autoui.audit.models.result import (
    AccessibilityViolation,
    BrokenLink,
    PageAudit,
    SeoAudit,
)


class FakePipeline:
    """Audit pipeline stand-in driven by a synthetic link graph.

    ``graph`` maps a URL to the links found on it, in DOM order. URLs in
    ``failing`` raise a navigation error; their links are still offered
    through ``recover_links`` when ``links_on_failure`` is set.
    """

    def __init__(
        self,
        graph: Dict[str, List[str]],
        viewport: str = "desktop",
        failing: Iterable[str] = (),
        links_on_failure: bool = False,
        page_result_kwargs: Optional[Dict] = None
    ):
        self.graph = graph
        self.viewport = viewport
        self.failing = set(failing)
        self.links_on_failure = links_on_failure
        self.page_result_kwargs = page_result_kwargs or {}
        self.calls: List[tuple] = []

    async def run(self, page, url: str, depth: int = 0) -> PageAudit:
        self.calls.append((url, depth))
        if url in self.failing:
            raise NavigationError(url, "net::ERR_NAME_NOT_RESOLVED")
        return PageAudit(
            url=url,
            viewport=self.viewport,
            depth=depth,
            title=f"Title of {url}",
            http_status=200,
            discovered_links=list(self.graph.get(url, [])),
            **self.page_result_kwargs,
        )

    async def recover_links(self, page, url: str) -> List[str]:
        if self.links_on_failure:
            return list(self.graph.get(url, []))
        return []

    @property
    def visited_urls(self) -> List[str]:
        return [url for url, _ in self.calls]


class FakeBrowserFactory:
    """Browser factory stand-in handing out one mock page per viewport."""

    def __init__(self, failing_profiles: Iterable[str] = ()):
        self.failing_profiles = set(failing_profiles)
        self.opened: List[str] = []
        self.closed: List[str] = []

    @asynccontextmanager
    async def page(self, profile):
        if profile.name in self.failing_profiles:
            raise RuntimeError(f"cannot create context for {profile.name}")
        self.opened.append(profile.name)
        page = MagicMock()
        page.viewport_name = profile.name
        try:
            yield page
        finally:
            self.closed.append(profile.name)


@pytest.fixture
def crawl_config():
    """Crawl configuration with a short page deadline."""
    return CrawlConfig(max_depth=2, max_links_per_page=2, page_deadline_seconds=5)


@pytest.fixture
def mock_page():
    """Mock Playwright page with synchronous event registration."""
    page = AsyncMock()
    page.on = MagicMock()
    page.remove_listener = MagicMock()
    page.url = "https://example.com/"
    return page


@pytest.fixture
def make_pipeline():
    """Factory for link-graph driven fake pipelines."""
    return FakePipeline


@pytest.fixture
def fake_browser_factory():
    return FakeBrowserFactory()


@pytest.fixture
def make_browser_factory():
    return FakeBrowserFactory


@pytest.fixture
def sample_audit():
    """A successful page audit with one critical violation and two broken links."""
    return PageAudit(
        url="https://example.com/",
        viewport="desktop",
        title="Example",
        http_status=200,
        accessibility=[
            AccessibilityViolation(id="image-alt", impact="critical", description="Images need alt", nodes=2),
            AccessibilityViolation(id="color-contrast", impact="serious", description="Low contrast", nodes=5),
        ],
        seo=SeoAudit(
            title_length=7,
            h1_count=1,
            broken_links=[
                BrokenLink(url="https://example.com/missing", status=404),
                BrokenLink(url="https://example.com/error", status=500),
            ],
        ),
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
