"""Content/SEO probe: meta data, heading count, broken links and images."""

import asyncio
import logging
from typing import Dict, List, Optional

from playwright.async_api import Page

from ..capture.network_observer import parse_content_length, size_in_kb
from ..models.result import BrokenLink, ImageAnalysis, SeoAudit

logger = logging.getLogger(__name__)


HEAD_TIMEOUT_MS = 5000
MAX_CONCURRENT_CHECKS = 8

LINKS_SCRIPT = "() => Array.from(document.querySelectorAll('a[href]'), a => a.href)"
IMAGES_SCRIPT = "() => Array.from(document.images, img => ({ src: img.src, alt: img.alt }))"


class ContentSeoProbe:
    """Collects basic SEO signals and checks links and images with HEAD requests."""

    def __init__(
        self,
        head_timeout_ms: int = HEAD_TIMEOUT_MS,
        max_concurrent_checks: int = MAX_CONCURRENT_CHECKS
    ):
        self.head_timeout_ms = head_timeout_ms
        self.max_concurrent_checks = max_concurrent_checks

    async def audit(self, page: Page) -> SeoAudit:
        """Run the content/SEO audit on the current document."""
        semaphore = asyncio.Semaphore(self.max_concurrent_checks)

        title = await page.title()
        meta = page.locator('meta[name="description"]')
        meta_description = None
        if await meta.count():
            meta_description = await meta.first.get_attribute("content")
        h1_count = await page.locator("h1").count()

        broken_links, images = await asyncio.gather(
            self.find_broken_links(page, semaphore),
            self.analyze_images(page, semaphore),
        )

        return SeoAudit(
            title_length=len(title or ""),
            meta_description=meta_description,
            h1_count=h1_count,
            broken_links=broken_links,
            image_analysis=images,
        )

    async def _head(self, page: Page, url: str, semaphore: asyncio.Semaphore):
        async with semaphore:
            return await page.context.request.head(url, timeout=self.head_timeout_ms)

    async def _check_link(
        self,
        page: Page,
        url: str,
        semaphore: asyncio.Semaphore
    ) -> Optional[BrokenLink]:
        try:
            response = await self._head(page, url, semaphore)
        except Exception as e:
            logger.warning(f"Could not check link {url}: {e}")
            return None
        if response.status >= 400:
            return BrokenLink(url=url, status=response.status)
        return None

    async def find_broken_links(self, page: Page, semaphore: asyncio.Semaphore) -> List[BrokenLink]:
        """HEAD every unique http(s) link and keep those answering with status >= 400."""
        links = await page.evaluate(LINKS_SCRIPT) or []
        unique_links = [link for link in dict.fromkeys(links) if link.startswith("http")]

        results = await asyncio.gather(
            *(self._check_link(page, link, semaphore) for link in unique_links)
        )
        broken = [result for result in results if result is not None]
        if broken:
            logger.info(f"Found {len(broken)} broken link(s) on {page.url}")
        return broken

    async def _analyze_image(
        self,
        page: Page,
        image: Dict[str, str],
        semaphore: asyncio.Semaphore
    ) -> ImageAnalysis:
        src = image.get("src") or ""
        kb = 0
        if src.startswith("http"):
            try:
                response = await self._head(page, src, semaphore)
                length = parse_content_length(response.headers)
                if length > 0:
                    kb = size_in_kb(length)
            except Exception as e:
                logger.warning(f"Could not fetch image size for {src}: {e}")
        return ImageAnalysis(src=src, alt_text_missing=not image.get("alt"), size_in_kb=kb)

    async def analyze_images(self, page: Page, semaphore: asyncio.Semaphore) -> List[ImageAnalysis]:
        """Report alt text presence and size for every image."""
        images = await page.evaluate(IMAGES_SCRIPT) or []
        return list(await asyncio.gather(
            *(self._analyze_image(page, image, semaphore) for image in images)
        ))
