"""Accessibility probe running axe-core inside the page."""

import logging
from typing import Any, Dict, List

from playwright.async_api import Page

from ..models.result import AccessibilityViolation

logger = logging.getLogger(__name__)


DEFAULT_AXE_SCRIPT_URL = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.2/axe.min.js"

AXE_RUN_SCRIPT = """
async () => {
    const results = await window.axe.run(document);
    return results.violations.map(v => ({
        id: v.id,
        impact: v.impact,
        description: v.description,
        help: v.help,
        helpUrl: v.helpUrl,
        nodes: v.nodes.length,
    }));
}
"""


def parse_violations(raw: List[Dict[str, Any]]) -> List[AccessibilityViolation]:
    """Map axe-core violation dicts onto violation records."""
    return [
        AccessibilityViolation(
            id=item.get("id", "unknown"),
            impact=item.get("impact"),
            description=item.get("description") or "",
            help=item.get("help") or "",
            help_url=item.get("helpUrl") or "",
            nodes=int(item.get("nodes") or 0),
        )
        for item in raw or []
    ]


class AccessibilityProbe:
    """Injects axe-core when needed and reports rule violations."""

    def __init__(self, script_url: str = DEFAULT_AXE_SCRIPT_URL):
        self.script_url = script_url

    async def _ensure_axe(self, page: Page) -> None:
        loaded = await page.evaluate("() => typeof window.axe !== 'undefined'")
        if not loaded:
            await page.add_script_tag(url=self.script_url)
            logger.debug(f"Injected axe-core from {self.script_url}")

    async def scan(self, page: Page) -> List[AccessibilityViolation]:
        """Run axe-core against the current document."""
        await self._ensure_axe(page)
        raw = await page.evaluate(AXE_RUN_SCRIPT)
        violations = parse_violations(raw)
        logger.debug(f"Accessibility: {len(violations)} violation(s)")
        return violations
