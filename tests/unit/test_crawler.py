"""Unit tests for the crawl orchestrator."""

import asyncio
from unittest.mock import MagicMock

import pytest

from autoui.audit.capture.viewports import VIEWPORT_PROFILES, resolve_viewports
from autoui.audit.crawler import Crawler, crawl_viewports, has_excluded_extension
from autoui.audit.models.crawl import CrawlConfig
from autoui.audit.models.result import CRAWL_ERROR_TITLE, FailedPage, PageAudit

SEED = "https://example.com/"


def make_crawler(pipeline, **config):
    return Crawler(pipeline, MagicMock(), "desktop", CrawlConfig(**config))


class TestExcludedExtensions:
    """Tests for binary extension filtering."""

    @pytest.mark.parametrize("url", [
        "https://example.com/file.pdf",
        "https://example.com/archive.ZIP",
        "https://example.com/doc.pdf?download=1",
        "https://example.com/movie.mp4#t=10",
    ])
    def test_excluded(self, url):
        assert has_excluded_extension(url, CrawlConfig().excluded_extensions)

    @pytest.mark.parametrize("url", [
        "https://example.com/pdf-guide",
        "https://example.com/page.html",
        "https://example.com/?file=report.pdf",
        "https://example.com/",
    ])
    def test_not_excluded(self, url):
        assert not has_excluded_extension(url, CrawlConfig().excluded_extensions)


class TestCrawlBounds:
    """Depth and breadth bounding."""

    @pytest.mark.asyncio
    async def test_depth_zero_explores_seed_only(self, make_pipeline):
        graph = {SEED: [f"{SEED}page{i}" for i in range(10)]}
        pipeline = make_pipeline(graph)
        crawler = make_crawler(pipeline, max_depth=0, max_links_per_page=5)

        results = await crawler.crawl(SEED)

        assert [r.url for r in results] == [SEED]
        assert pipeline.visited_urls == [SEED]

    @pytest.mark.asyncio
    async def test_children_limited_to_first_k_in_dom_order(self, make_pipeline):
        links = [f"{SEED}page{i}" for i in range(5)]
        pipeline = make_pipeline({SEED: links})
        crawler = make_crawler(pipeline, max_depth=1, max_links_per_page=2)

        results = await crawler.crawl(SEED)

        assert [r.url for r in results] == [SEED, links[0], links[1]]
        assert [r.depth for r in results] == [0, 1, 1]

    @pytest.mark.asyncio
    async def test_zero_links_per_page(self, make_pipeline):
        pipeline = make_pipeline({SEED: [f"{SEED}a", f"{SEED}b"]})
        crawler = make_crawler(pipeline, max_depth=3, max_links_per_page=0)

        results = await crawler.crawl(SEED)

        assert len(results) == 1

    @pytest.mark.asyncio
    async def test_pdf_links_filtered_before_truncation(self, make_pipeline):
        """Seed with 10 links, 2 of them PDFs, depth 1 and 3 links per page."""
        links = [
            f"{SEED}guide.pdf",
            f"{SEED}page0",
            f"{SEED}manual.pdf",
            *[f"{SEED}page{i}" for i in range(1, 8)],
        ]
        assert len(links) == 10
        graph = {SEED: links}
        graph.update({link: [f"{link}/deeper"] for link in links})
        pipeline = make_pipeline(graph)
        crawler = make_crawler(pipeline, max_depth=1, max_links_per_page=3)

        results = await crawler.crawl(SEED)

        assert len(results) == 4
        assert [r.url for r in results] == [SEED, f"{SEED}page0", f"{SEED}page1", f"{SEED}page2"]
        assert results[0].depth == 0
        assert all(r.depth == 1 for r in results[1:])
        assert not any(r.url.endswith(".pdf") for r in results)

    @pytest.mark.asyncio
    async def test_non_http_links_skipped(self, make_pipeline):
        links = [
            "mailto:info@example.com",
            "javascript:void(0)",
            "ftp://example.com/file",
            "tel:+15555550100",
            f"{SEED}contact",
        ]
        pipeline = make_pipeline({SEED: links})
        crawler = make_crawler(pipeline, max_depth=1, max_links_per_page=1)

        results = await crawler.crawl(SEED)

        assert [r.url for r in results] == [SEED, f"{SEED}contact"]

    @pytest.mark.asyncio
    async def test_depth_first_order(self, make_pipeline):
        graph = {
            SEED: [f"{SEED}a", f"{SEED}b"],
            f"{SEED}a": [f"{SEED}a1", f"{SEED}a2"],
            f"{SEED}b": [f"{SEED}b1"],
        }
        pipeline = make_pipeline(graph)
        crawler = make_crawler(pipeline, max_depth=2, max_links_per_page=2)

        results = await crawler.crawl(SEED)

        assert [r.url for r in results] == [
            SEED, f"{SEED}a", f"{SEED}a1", f"{SEED}a2", f"{SEED}b", f"{SEED}b1",
        ]
        assert [r.depth for r in results] == [0, 1, 2, 2, 1, 2]

    @pytest.mark.asyncio
    async def test_explore_beyond_max_depth_is_noop(self, make_pipeline):
        pipeline = make_pipeline({})
        crawler = make_crawler(pipeline, max_depth=1)

        await crawler.explore(SEED, depth=2)

        assert crawler.results == []
        assert SEED not in crawler.visited


class TestVisitedSet:
    """Idempotent visitation."""

    @pytest.mark.asyncio
    async def test_cycle_visited_once(self, make_pipeline):
        a, b = f"{SEED}a", f"{SEED}b"
        graph = {SEED: [a], a: [b], b: [a, SEED]}
        pipeline = make_pipeline(graph)
        crawler = make_crawler(pipeline, max_depth=10, max_links_per_page=5)

        results = await crawler.crawl(SEED)

        urls = [r.url for r in results]
        assert urls == [SEED, a, b]
        assert len(urls) == len(set(urls))

    @pytest.mark.asyncio
    async def test_shared_child_visited_once(self, make_pipeline):
        shared = f"{SEED}shared"
        graph = {
            SEED: [f"{SEED}a", f"{SEED}b"],
            f"{SEED}a": [shared],
            f"{SEED}b": [shared],
        }
        pipeline = make_pipeline(graph)
        crawler = make_crawler(pipeline, max_depth=2, max_links_per_page=2)

        results = await crawler.crawl(SEED)

        assert [r.url for r in results].count(shared) == 1
        assert pipeline.visited_urls.count(shared) == 1

    @pytest.mark.asyncio
    async def test_repeated_link_on_page_counts_once(self, make_pipeline):
        a, b = f"{SEED}a", f"{SEED}b"
        pipeline = make_pipeline({SEED: [a, a, a, b]})
        crawler = make_crawler(pipeline, max_depth=1, max_links_per_page=2)

        results = await crawler.crawl(SEED)

        assert [r.url for r in results] == [SEED, a, b]

    @pytest.mark.asyncio
    async def test_no_url_normalization(self, make_pipeline):
        variants = [f"{SEED}page", f"{SEED}page/", f"{SEED}page#top"]
        pipeline = make_pipeline({SEED: variants})
        crawler = make_crawler(pipeline, max_depth=1, max_links_per_page=5)

        results = await crawler.crawl(SEED)

        assert [r.url for r in results] == [SEED, *variants]

    @pytest.mark.asyncio
    async def test_url_marked_visited_before_pipeline_runs(self, make_pipeline):
        pipeline = make_pipeline({})
        crawler = make_crawler(pipeline, max_depth=0)
        seen_during_run = []

        original_run = pipeline.run

        async def observing_run(page, url, depth=0):
            seen_during_run.append(url in crawler.visited)
            return await original_run(page, url, depth)

        pipeline.run = observing_run
        await crawler.crawl(SEED)

        assert seen_during_run == [True]

    @pytest.mark.asyncio
    async def test_second_explore_of_same_url_is_noop(self, make_pipeline):
        pipeline = make_pipeline({})
        crawler = make_crawler(pipeline, max_depth=1)

        await crawler.explore(SEED)
        await crawler.explore(SEED)

        assert len(crawler.results) == 1
        assert pipeline.visited_urls == [SEED]


class TestFailureHandling:
    """Degraded results and crawl continuation."""

    @pytest.mark.asyncio
    async def test_failed_child_recorded_and_siblings_explored(self, make_pipeline):
        bad, good = f"{SEED}bad", f"{SEED}good"
        pipeline = make_pipeline({SEED: [bad, good]}, failing=[bad])
        crawler = make_crawler(pipeline, max_depth=1, max_links_per_page=2)

        results = await crawler.crawl(SEED)

        assert [r.url for r in results] == [SEED, bad, good]
        failed = results[1]
        assert isinstance(failed, FailedPage)
        assert failed.title == CRAWL_ERROR_TITLE
        assert failed.http_status == 0
        assert failed.viewport == "desktop"
        assert failed.depth == 1
        assert "ERR_NAME_NOT_RESOLVED" in failed.reason
        assert isinstance(results[2], PageAudit)

    @pytest.mark.asyncio
    async def test_failed_seed_still_recorded(self, make_pipeline):
        pipeline = make_pipeline({SEED: [f"{SEED}a"]}, failing=[SEED])
        crawler = make_crawler(pipeline, max_depth=1)

        results = await crawler.crawl(SEED)

        assert len(results) == 1
        assert not results[0].is_successful
        assert crawler.stats.pages_failed == 1
        assert crawler.stats.pages_succeeded == 0

    @pytest.mark.asyncio
    async def test_failed_page_links_recovered_when_available(self, make_pipeline):
        pipeline = make_pipeline({SEED: [f"{SEED}a"]}, failing=[SEED], links_on_failure=True)
        crawler = make_crawler(pipeline, max_depth=1)

        results = await crawler.crawl(SEED)

        assert [r.url for r in results] == [SEED, f"{SEED}a"]

    @pytest.mark.asyncio
    async def test_link_recovery_error_does_not_abort(self, make_pipeline):
        pipeline = make_pipeline({}, failing=[SEED])

        async def broken_recovery(page, url):
            raise RuntimeError("page crashed")

        pipeline.recover_links = broken_recovery
        crawler = make_crawler(pipeline, max_depth=1)

        results = await crawler.crawl(SEED)

        assert len(results) == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_degraded_result(self, make_pipeline):
        pipeline = make_pipeline({})

        async def exploding_run(page, url, depth=0):
            raise ValueError("unexpected")

        pipeline.run = exploding_run
        crawler = make_crawler(pipeline, max_depth=0)

        results = await crawler.crawl(SEED)

        assert isinstance(results[0], FailedPage)
        assert results[0].reason == "unexpected"

    @pytest.mark.asyncio
    async def test_page_deadline(self, make_pipeline):
        slow, fast = f"{SEED}slow", f"{SEED}fast"
        pipeline = make_pipeline({SEED: [slow, fast]})
        original_run = pipeline.run

        async def sometimes_slow(page, url, depth=0):
            if url == slow:
                await asyncio.sleep(5)
            return await original_run(page, url, depth)

        pipeline.run = sometimes_slow
        crawler = make_crawler(pipeline, max_depth=1, page_deadline_seconds=0.05)

        results = await crawler.crawl(SEED)

        assert [r.url for r in results] == [SEED, slow, fast]
        assert isinstance(results[1], FailedPage)
        assert "deadline" in results[1].reason

    @pytest.mark.asyncio
    async def test_hung_page_does_not_stall_link_recovery(self, make_pipeline):
        pipeline = make_pipeline({SEED: [f"{SEED}a"]}, links_on_failure=True)

        async def hung_run(page, url, depth=0):
            await asyncio.sleep(60)

        async def hung_recovery(page, url):
            await asyncio.sleep(60)
            return [f"{SEED}a"]

        pipeline.run = hung_run
        pipeline.recover_links = hung_recovery
        crawler = make_crawler(pipeline, max_depth=1, page_deadline_seconds=0.05)

        results = await asyncio.wait_for(crawler.crawl(SEED), timeout=2)

        assert [r.url for r in results] == [SEED]
        assert "deadline" in results[0].reason

    @pytest.mark.asyncio
    async def test_stats_tracked(self, make_pipeline):
        pipeline = make_pipeline(
            {SEED: [f"{SEED}a", f"{SEED}b", f"{SEED}c.pdf"]},
            failing=[f"{SEED}b"],
        )
        crawler = make_crawler(pipeline, max_depth=1, max_links_per_page=5)

        await crawler.crawl(SEED)

        summary = crawler.stats.export_summary()
        assert summary["pages_attempted"] == 3
        assert summary["pages_succeeded"] == 2
        assert summary["pages_failed"] == 1
        assert summary["links_discovered"] == 3
        assert summary["links_skipped"] == 1
        assert summary["duration_seconds"] is not None


class TestMultiViewport:
    """Independent crawls per viewport profile."""

    @pytest.mark.asyncio
    async def test_same_seed_once_per_viewport(self, make_pipeline, fake_browser_factory):
        profiles = resolve_viewports(["desktop", "mobile"])

        results = await crawl_viewports(
            fake_browser_factory,
            profiles,
            SEED,
            lambda profile: make_pipeline({}, viewport=profile.name),
            CrawlConfig(max_depth=2),
        )

        assert len(results) == 2
        assert [r.url for r in results] == [SEED, SEED]
        assert [r.viewport for r in results] == ["desktop", "mobile"]
        assert fake_browser_factory.closed == ["desktop", "mobile"]

    @pytest.mark.asyncio
    async def test_parallel_viewports_keep_profile_order(self, make_pipeline, fake_browser_factory):
        profiles = resolve_viewports(["tablet", "desktop", "mobile"])
        graph = {SEED: [f"{SEED}a"]}

        results = await crawl_viewports(
            fake_browser_factory,
            profiles,
            SEED,
            lambda profile: make_pipeline(graph, viewport=profile.name),
            CrawlConfig(max_depth=1),
            parallel=True,
        )

        assert [r.viewport for r in results] == ["tablet", "tablet", "desktop", "desktop", "mobile", "mobile"]
        assert sorted(fake_browser_factory.closed) == ["desktop", "mobile", "tablet"]

    @pytest.mark.asyncio
    async def test_visited_sets_are_independent(self, make_pipeline, fake_browser_factory):
        pipelines = {}

        def factory(profile):
            pipelines[profile.name] = make_pipeline({SEED: [f"{SEED}a"]}, viewport=profile.name)
            return pipelines[profile.name]

        await crawl_viewports(
            fake_browser_factory,
            resolve_viewports(["desktop", "mobile"]),
            SEED,
            factory,
            CrawlConfig(max_depth=1),
        )

        assert pipelines["desktop"].visited_urls == [SEED, f"{SEED}a"]
        assert pipelines["mobile"].visited_urls == [SEED, f"{SEED}a"]

    @pytest.mark.asyncio
    async def test_failing_viewport_does_not_stop_others(self, make_pipeline, make_browser_factory):
        factory = make_browser_factory(failing_profiles=["mobile"])

        results = await crawl_viewports(
            factory,
            resolve_viewports(["mobile", "desktop"]),
            SEED,
            lambda profile: make_pipeline({}, viewport=profile.name),
        )

        assert [r.viewport for r in results] == ["desktop"]

    def test_unknown_viewport_skipped(self, caplog):
        profiles = resolve_viewports(["desktop", "smartwatch", "mobile"])

        assert [p.name for p in profiles] == ["desktop", "mobile"]
        assert "smartwatch" in caplog.text

    def test_registry_profiles(self):
        assert VIEWPORT_PROFILES["desktop"].viewport == {"width": 1920, "height": 1080}
        assert VIEWPORT_PROFILES["mobile"].device == "iPhone 13 Pro"
        assert VIEWPORT_PROFILES["tablet"].device == "iPad Pro 11"
