"""Threshold-based pass/fail decision over aggregated crawl results."""

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from ..audit.models.result import PageResult

logger = logging.getLogger(__name__)


@dataclass
class QualityGateThresholds:
    """Maximum tolerated totals across every page and viewport."""
    max_critical_accessibility_issues: int = 0
    max_broken_links: int = 5


@dataclass
class QualityGateResult:
    """Outcome of a quality gate evaluation."""
    critical_accessibility_issues: int
    broken_links: int
    thresholds: QualityGateThresholds
    breaches: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.breaches


def evaluate_quality_gate(
    results: Sequence[PageResult],
    thresholds: QualityGateThresholds
) -> QualityGateResult:
    """Aggregate critical accessibility violations and broken links, then compare.

    Degraded results contribute nothing to either total.
    """
    critical = sum(r.critical_accessibility_issues for r in results)
    broken = sum(r.broken_link_count for r in results)

    outcome = QualityGateResult(
        critical_accessibility_issues=critical,
        broken_links=broken,
        thresholds=thresholds,
    )

    if critical > thresholds.max_critical_accessibility_issues:
        outcome.breaches.append(
            f"Found {critical} critical accessibility issues "
            f"(limit: {thresholds.max_critical_accessibility_issues})"
        )
    if broken > thresholds.max_broken_links:
        outcome.breaches.append(
            f"Found {broken} broken links (limit: {thresholds.max_broken_links})"
        )

    for breach in outcome.breaches:
        logger.warning(f"Quality gate breached: {breach}")

    return outcome
