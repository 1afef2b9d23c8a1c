"""Heuristic interaction engine.

Simulates plausible user behavior on a page of unknown structure: dismiss
overlays, fill forms, click one call-to-action button, then scroll. Every
stage is independently fault tolerant and reports its outcome as an
``InteractionAction`` so callers can assert on outcomes instead of log text.
``explore()`` always returns a result and never raises for page problems.
"""

import logging
from typing import Optional

from playwright.async_api import Locator, Page

from ..errors import InteractionFailure
from ..models.crawl import ExplorerConfig
from ..models.result import ExplorationResult, InteractionOutcome, InteractionStage
from .data import SyntheticDataGenerator

logger = logging.getLogger(__name__)


FILLABLE_SELECTOR = (
    'input[type="text"], input[type="email"], input[type="password"], '
    'input[type="tel"], input[type="number"], textarea'
)
CHECKABLE_SELECTOR = 'input[type="checkbox"], input[type="radio"]'


class HeuristicExplorer:
    """Runs the bounded, best-effort interaction sequence on one page."""

    def __init__(
        self,
        config: Optional[ExplorerConfig] = None,
        data_generator: Optional[SyntheticDataGenerator] = None
    ):
        self.config = config or ExplorerConfig()
        self.data = data_generator or SyntheticDataGenerator(
            number_min=self.config.number_min,
            number_max=self.config.number_max,
        )

    async def explore(self, page: Page) -> ExplorationResult:
        """Run all stages in order and return the action log and form count."""
        result = ExplorationResult()
        result.record(InteractionStage.START, InteractionOutcome.SUCCEEDED, f"Exploring: {page.url}")

        for stage, handler in (
            (InteractionStage.OVERLAY, self._dismiss_overlay),
            (InteractionStage.FORMS, self._interact_with_forms),
            (InteractionStage.ACTION_BUTTON, self._click_action_button),
            (InteractionStage.SCROLL, self._scroll),
        ):
            try:
                await handler(page, result)
            except Exception as e:
                failure = InteractionFailure(stage.value, e)
                logger.warning(str(failure))
                result.record(stage, InteractionOutcome.FAILED, f"Stage {stage.value} failed", str(e))

        return result

    async def _dismiss_overlay(self, page: Page, result: ExplorationResult) -> None:
        await page.wait_for_timeout(self.config.overlay_wait_ms)

        button = page.get_by_role("button", name=self.config.overlay_pattern).first
        if not await button.is_visible():
            result.record(InteractionStage.OVERLAY, InteractionOutcome.NOT_APPLICABLE,
                          "No common overlays detected.")
            return

        await button.click(timeout=self.config.action_timeout_ms)
        await page.wait_for_load_state("domcontentloaded")
        result.record(InteractionStage.OVERLAY, InteractionOutcome.SUCCEEDED,
                      "Accepted cookie banner/overlay.")
        logger.debug("Dismissed overlay")

    async def _interact_with_forms(self, page: Page, result: ExplorationResult) -> None:
        result.forms_detected = await page.locator("form").count()
        if result.forms_detected:
            result.record(InteractionStage.FORMS, InteractionOutcome.SUCCEEDED,
                          f"Detected {result.forms_detected} form(s)")
        else:
            result.record(InteractionStage.FORMS, InteractionOutcome.NOT_APPLICABLE,
                          "No forms detected")

        limit = self.config.max_inputs_to_fill
        fillable = (await page.locator(FILLABLE_SELECTOR).all())[:limit]
        for field in fillable:
            await self._fill_field(field, result)

        checkables = (await page.locator(CHECKABLE_SELECTOR).all())[:limit]
        for field in checkables:
            await self._check_field(field, result)

    async def _fill_field(self, field: Locator, result: ExplorationResult) -> None:
        input_type = "textarea"
        try:
            input_type = (await field.get_attribute("type")) or "textarea"
            if not await field.is_editable():
                result.record(InteractionStage.FORMS, InteractionOutcome.NOT_APPLICABLE,
                              f"Input ({input_type}) is not editable.")
                return
            value = self.data.value_for(
                input_type,
                placeholder=await field.get_attribute("placeholder"),
                name=await field.get_attribute("name"),
            )
            await field.fill(value, timeout=self.config.action_timeout_ms)
            result.record(InteractionStage.FORMS, InteractionOutcome.SUCCEEDED,
                          f"Filled input ({input_type})")
        except Exception as e:
            logger.debug(f"Could not fill input ({input_type}): {e}")
            result.record(InteractionStage.FORMS, InteractionOutcome.FAILED,
                          f"Could not fill input ({input_type})", str(e))

    async def _check_field(self, field: Locator, result: ExplorationResult) -> None:
        input_type = "checkbox"
        try:
            input_type = (await field.get_attribute("type")) or "checkbox"
            if not await field.is_enabled() or await field.is_checked():
                return
            await field.check(timeout=self.config.action_timeout_ms)
            result.record(InteractionStage.FORMS, InteractionOutcome.SUCCEEDED,
                          f"Checked input ({input_type})")
        except Exception as e:
            logger.debug(f"Could not check input ({input_type}): {e}")
            result.record(InteractionStage.FORMS, InteractionOutcome.FAILED,
                          f"Could not check input ({input_type})", str(e))

    async def _click_action_button(self, page: Page, result: ExplorationResult) -> None:
        candidates = await page.get_by_role("button", name=self.config.action_button_pattern).all()

        for button in candidates[:self.config.max_action_buttons]:
            label = ""
            try:
                if not (await button.is_visible() and await button.is_enabled()):
                    continue
                label = (await button.inner_text()).strip()
                await button.click(timeout=self.config.action_timeout_ms)
                await page.wait_for_load_state("domcontentloaded")
                result.record(InteractionStage.ACTION_BUTTON, InteractionOutcome.SUCCEEDED,
                              f'Clicked button: "{label}"')
                return
            except Exception as e:
                logger.debug(f'Failed to click button "{label}": {e}')
                result.record(InteractionStage.ACTION_BUTTON, InteractionOutcome.FAILED,
                              f'Failed to click button: "{label}"', str(e))

        if InteractionOutcome.FAILED not in result.outcomes_for(InteractionStage.ACTION_BUTTON):
            result.record(InteractionStage.ACTION_BUTTON, InteractionOutcome.NOT_APPLICABLE,
                          "No action buttons found")

    async def _scroll(self, page: Page, result: ExplorationResult) -> None:
        try:
            await page.evaluate("() => window.scrollBy(0, window.innerHeight)")
            await page.wait_for_load_state("domcontentloaded")
            result.record(InteractionStage.SCROLL, InteractionOutcome.SUCCEEDED, "Scrolled down the page")
        except Exception as e:
            result.record(InteractionStage.SCROLL, InteractionOutcome.FAILED,
                          "Could not scroll down the page", str(e))

        try:
            await page.evaluate("() => window.scrollTo(0, document.body.scrollHeight)")
            result.record(InteractionStage.SCROLL, InteractionOutcome.SUCCEEDED, "Scrolled to bottom")
        except Exception as e:
            result.record(InteractionStage.SCROLL, InteractionOutcome.FAILED,
                          "Could not scroll to bottom", str(e))
