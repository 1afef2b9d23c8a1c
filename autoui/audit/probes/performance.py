"""Performance probe based on the Navigation Timing API."""

import logging
from typing import Any, Dict, Optional, Tuple

from playwright.async_api import Page

from ..models.result import PerformanceMetrics, PerformanceRating, SpeedRating

logger = logging.getLogger(__name__)


# Upper bounds in seconds for (fast, medium); anything slower is SLOW.
SPEED_THRESHOLDS: Dict[str, Tuple[float, float]] = {
    "ttfb": (0.3, 0.6),
    "dom_content_loaded": (1.5, 3.0),
    "load_time": (2.0, 4.0),
}

NAVIGATION_TIMING_SCRIPT = """
() => {
    const [entry] = performance.getEntriesByType('navigation');
    if (entry) {
        return {
            responseStart: entry.responseStart,
            domContentLoadedEventEnd: entry.domContentLoadedEventEnd,
            loadEventEnd: entry.loadEventEnd,
        };
    }
    const t = performance.timing;
    return {
        responseStart: t.responseStart ? t.responseStart - t.navigationStart : 0,
        domContentLoadedEventEnd: t.domContentLoadedEventEnd ? t.domContentLoadedEventEnd - t.navigationStart : 0,
        loadEventEnd: t.loadEventEnd ? t.loadEventEnd - t.navigationStart : 0,
    };
}
"""


def rate_speed(value: Optional[float], metric: str) -> SpeedRating:
    """Rate a timing value in seconds against the thresholds for ``metric``."""
    if value is None or metric not in SPEED_THRESHOLDS:
        return SpeedRating.UNKNOWN
    fast, medium = SPEED_THRESHOLDS[metric]
    if value < fast:
        return SpeedRating.FAST
    if value < medium:
        return SpeedRating.MEDIUM
    return SpeedRating.SLOW


def _to_seconds(value: Any) -> Optional[float]:
    # Timing marks that have not happened yet are reported as 0.
    if not isinstance(value, (int, float)) or value <= 0:
        return None
    return round(value / 1000, 3)


def build_metrics(timing: Dict[str, Any]) -> PerformanceMetrics:
    """Convert raw millisecond timing marks into rated metrics."""
    load_time = _to_seconds(timing.get("loadEventEnd"))
    dom_content_loaded = _to_seconds(timing.get("domContentLoadedEventEnd"))
    ttfb = _to_seconds(timing.get("responseStart"))

    return PerformanceMetrics(
        load_time=load_time,
        dom_content_loaded=dom_content_loaded,
        ttfb=ttfb,
        rating=PerformanceRating(
            load_time=rate_speed(load_time, "load_time"),
            dom_content_loaded=rate_speed(dom_content_loaded, "dom_content_loaded"),
            ttfb=rate_speed(ttfb, "ttfb"),
        ),
    )


async def collect_performance(page: Page) -> PerformanceMetrics:
    """Read navigation timing from the page and rate it."""
    timing = await page.evaluate(NAVIGATION_TIMING_SCRIPT) or {}
    metrics = build_metrics(timing)
    logger.debug(
        f"Performance: ttfb={metrics.ttfb} dom={metrics.dom_content_loaded} load={metrics.load_time}"
    )
    return metrics
