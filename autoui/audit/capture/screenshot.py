"""Full-page screenshot capture."""

import logging
import time
from pathlib import Path

from playwright.async_api import Page

logger = logging.getLogger(__name__)


async def capture_screenshot(page: Page, screenshot_dir: Path, viewport: str) -> str:
    """Save a full-page PNG and return its path.

    Files are named ``<viewport>_<epoch ms>.png`` inside ``screenshot_dir``.
    """
    screenshot_dir = Path(screenshot_dir)
    screenshot_dir.mkdir(parents=True, exist_ok=True)

    path = screenshot_dir / f"{viewport}_{int(time.time() * 1000)}.png"
    await page.screenshot(path=str(path), full_page=True)

    logger.debug(f"Screenshot saved: {path}")
    return str(path)
