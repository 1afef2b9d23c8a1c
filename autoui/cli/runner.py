"""CLI runner: per-viewport crawls, report writing and exit code mapping."""

import logging
from datetime import datetime
from enum import IntEnum
from typing import List, Optional

import typer

from ..audit.capture.browser_factory import BrowserConfig, BrowserFactory
from ..audit.capture.viewports import resolve_viewports
from ..audit.crawler import crawl_viewports
from ..audit.explorer.engine import HeuristicExplorer
from ..audit.models.crawl import ViewportProfile
from ..audit.models.result import PageResult
from ..audit.pipeline import AuditPipeline
from ..audit.probes.accessibility import AccessibilityProbe
from ..audit.probes.content_seo import ContentSeoProbe
from ..reporting.html_report import render_html
from ..reporting.json_report import render_json
from ..reporting.lifecycle import clear_reports, screenshot_dir
from .config import CLIConfiguration
from .quality_gate import QualityGateThresholds, evaluate_quality_gate

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """CLI exit codes for CI/CD integration."""
    SUCCESS = 0              # Crawl finished and the quality gate passed (or is disabled)
    QUALITY_GATE_FAILED = 1  # Thresholds breached
    CONFIG_ERROR = 3         # Configuration or setup error
    RUNTIME_ERROR = 4        # Runtime error during execution


class CLIRunner:
    """Runs one crawl of a seed URL across the configured viewports."""

    def __init__(
        self,
        config: CLIConfiguration,
        seed_url: str,
        browser_factory: Optional[BrowserFactory] = None
    ):
        self.config = config
        self.seed_url = seed_url
        self.browser_factory = browser_factory or BrowserFactory(self.browser_config())
        self.start_time: Optional[datetime] = None
        self.results: List[PageResult] = []
        self.screenshot_dir = screenshot_dir(config.output.output_dir)

    def browser_config(self) -> BrowserConfig:
        """Browser launch and context options from the ``browser`` section."""
        section = self.config.browser
        return BrowserConfig(
            engine=section.engine,
            headless=section.headless,
            slow_mo=section.slow_mo,
            user_agent=section.user_agent,
            extra_headers=section.extra_headers,
            locale=section.locale,
        )

    def _echo(self, message: str) -> None:
        if not self.config.output.quiet:
            typer.echo(message)

    def _create_pipeline(self, profile: ViewportProfile) -> AuditPipeline:
        return AuditPipeline(
            viewport=profile.name,
            screenshot_dir=self.screenshot_dir,
            crawl_config=self.config.crawl,
            explorer=HeuristicExplorer(self.config.explorer),
            accessibility_probe=AccessibilityProbe(self.config.browser.axe_script_url),
            seo_probe=ContentSeoProbe(),
        )

    async def run(self) -> ExitCode:
        """Run the crawl, write reports and evaluate the quality gate."""
        self.start_time = datetime.utcnow()
        output_dir = self.config.output.output_dir

        self._echo(f"🚀 Crawling {self.seed_url}")
        self._echo(
            f"   depth={self.config.crawl.max_depth} "
            f"max_links={self.config.crawl.max_links_per_page} "
            f"viewports={','.join(self.config.browser.viewports)}"
        )

        try:
            self.screenshot_dir = clear_reports(output_dir)
        except OSError as e:
            typer.echo(f"❌ Cannot prepare output directory {output_dir}: {e}", err=True)
            return ExitCode.CONFIG_ERROR

        profiles = resolve_viewports(self.config.browser.viewports)
        if not profiles:
            self._echo("⚠️  No known viewports requested; nothing to crawl")

        try:
            if profiles:
                await self.browser_factory.start()
                try:
                    self.results = await crawl_viewports(
                        self.browser_factory,
                        profiles,
                        self.seed_url,
                        self._create_pipeline,
                        self.config.crawl,
                        parallel=self.config.browser.parallel_viewports,
                    )
                finally:
                    await self.browser_factory.stop()

            self._write_reports()

        except Exception as e:
            logger.exception("Crawl run failed")
            typer.echo(f"❌ Runtime error: {e}", err=True)
            return ExitCode.RUNTIME_ERROR

        self._print_summary()
        return self._evaluate_gate()

    def _write_reports(self) -> None:
        output_dir = self.config.output.output_dir
        if "json" in self.config.output.formats:
            path = render_json(self.results, output_dir)
            self._echo(f"✅ Results saved to {path}")
        if "html" in self.config.output.formats:
            path = render_html(self.results, output_dir)
            self._echo(f"✅ HTML report generated at: {path}")

    def _print_summary(self) -> None:
        failed = sum(1 for r in self.results if not r.is_successful)
        duration = (datetime.utcnow() - self.start_time).total_seconds()
        self._echo(
            f"📊 {len(self.results)} page result(s), {failed} failed, in {duration:.1f}s"
        )

    def _evaluate_gate(self) -> ExitCode:
        gate = self.config.gate
        if not gate.enabled:
            return ExitCode.SUCCESS

        outcome = evaluate_quality_gate(self.results, QualityGateThresholds(
            max_critical_accessibility_issues=gate.max_critical_accessibility_issues,
            max_broken_links=gate.max_broken_links,
        ))

        if outcome.passed:
            self._echo("✅ Quality gate passed")
            return ExitCode.SUCCESS

        for breach in outcome.breaches:
            typer.echo(f"❌ QUALITY GATE FAILED: {breach}", err=True)
        return ExitCode.QUALITY_GATE_FAILED
