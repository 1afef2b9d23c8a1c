"""Pydantic models for per-page audit results.

A processed URL yields exactly one ``PageResult``, which is a tagged variant:
``PageAudit`` for a page that was navigated and audited, or ``FailedPage``
for a degraded record that only preserves the fact the URL was attempted.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


CRAWL_ERROR_TITLE = "CRAWL_ERROR"


class SpeedRating(str, Enum):
    """Qualitative rating of a timing metric."""
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"
    UNKNOWN = "unknown"


class InteractionOutcome(str, Enum):
    """Outcome of one heuristic interaction attempt."""
    SUCCEEDED = "succeeded"
    NOT_APPLICABLE = "not_applicable"
    FAILED = "failed"


class InteractionStage(str, Enum):
    """Stages of the heuristic interaction engine, in execution order."""
    START = "start"
    OVERLAY = "overlay"
    FORMS = "forms"
    ACTION_BUTTON = "action_button"
    SCROLL = "scroll"


class ConsoleMessage(BaseModel):
    """Console message emitted by the page during one visit."""

    type: str = Field(description="Console message type (log, warning, error, ...)")
    text: str = Field(description="Console message text")

    @classmethod
    def from_playwright_message(cls, message):
        """Create ConsoleMessage from a Playwright console message."""
        return cls(type=message.type, text=message.text)


class FailedRequest(BaseModel):
    """Network response whose status was not 200."""

    url: str = Field(description="Response URL")
    status: int = Field(description="HTTP status code")


class PerformanceRating(BaseModel):
    """Per-metric speed ratings."""

    load_time: SpeedRating = Field(default=SpeedRating.UNKNOWN)
    dom_content_loaded: SpeedRating = Field(default=SpeedRating.UNKNOWN)
    ttfb: SpeedRating = Field(default=SpeedRating.UNKNOWN)


class PerformanceMetrics(BaseModel):
    """Navigation timing metrics in seconds."""

    load_time: Optional[float] = Field(default=None, description="Navigation start to load end")
    dom_content_loaded: Optional[float] = Field(
        default=None,
        description="Navigation start to DOMContentLoaded end"
    )
    ttfb: Optional[float] = Field(default=None, description="Time to first byte")
    rating: PerformanceRating = Field(default_factory=PerformanceRating)


class AccessibilityViolation(BaseModel):
    """One accessibility rule violation reported by axe-core."""

    id: str = Field(description="Rule identifier")
    impact: Optional[str] = Field(default=None, description="critical, serious, moderate or minor")
    description: str = Field(default="", description="Rule description")
    help: str = Field(default="", description="Short remediation help")
    help_url: str = Field(default="", description="Link to rule documentation")
    nodes: int = Field(default=0, ge=0, description="Number of affected DOM nodes")

    @property
    def is_critical(self) -> bool:
        return self.impact == "critical"


class InteractionAction(BaseModel):
    """One entry of the heuristic interaction log."""

    stage: InteractionStage = Field(description="Engine stage that produced the entry")
    outcome: InteractionOutcome = Field(description="Outcome of the attempt")
    message: str = Field(description="Human-readable description of the outcome")
    reason: Optional[str] = Field(default=None, description="Failure reason, if any")


class ExplorationResult(BaseModel):
    """Output of the heuristic interaction engine."""

    actions: List[InteractionAction] = Field(default_factory=list)
    forms_detected: int = Field(default=0, ge=0)

    @property
    def log(self) -> List[str]:
        """Human-readable action log in causal order."""
        return [action.message for action in self.actions]

    def record(
        self,
        stage: InteractionStage,
        outcome: InteractionOutcome,
        message: str,
        reason: Optional[str] = None
    ) -> InteractionAction:
        """Append an entry to the action log."""
        action = InteractionAction(stage=stage, outcome=outcome, message=message, reason=reason)
        self.actions.append(action)
        return action

    def outcomes_for(self, stage: InteractionStage) -> List[InteractionOutcome]:
        return [a.outcome for a in self.actions if a.stage == stage]


class HeaderAudit(BaseModel):
    """Presence and basic compliance of one security header."""

    name: str
    value: Optional[str] = None
    present: bool = False
    description: str = ""
    compliant: bool = False


class MixedContent(BaseModel):
    """Insecure subresource loaded by a secure page."""

    url: str
    type: Literal["active", "passive"]


class SecurityAudit(BaseModel):
    """Security probe output."""

    is_https: bool
    mixed_content: List[MixedContent] = Field(default_factory=list)
    headers: List[HeaderAudit] = Field(default_factory=list)


class BrokenLink(BaseModel):
    url: str
    status: int


class ImageAnalysis(BaseModel):
    src: str
    alt_text_missing: bool
    size_in_kb: int = 0


class SeoAudit(BaseModel):
    """Content/SEO probe output."""

    title_length: int = 0
    meta_description: Optional[str] = None
    h1_count: int = 0
    broken_links: List[BrokenLink] = Field(default_factory=list)
    image_analysis: List[ImageAnalysis] = Field(default_factory=list)


class ResourceInfo(BaseModel):
    """One response observed while listening during a page visit."""

    url: str
    resource_type: str
    size_in_kb: int = Field(ge=0)


class NetworkAnalysis(BaseModel):
    """Read-only network weight summary for one page visit."""

    total_page_weight_kb: int = 0
    total_requests: int = 0
    top_heaviest_resources: List[ResourceInfo] = Field(default_factory=list)
    unused_css_percentage: int = 0


class PageResultBase(BaseModel):
    """Fields shared by both result variants."""

    url: str = Field(description="URL that was attempted")
    viewport: str = Field(description="Viewport profile the page was audited under")
    depth: int = Field(default=0, ge=0, description="Crawl depth at which the URL was visited")
    visited_at: datetime = Field(default_factory=datetime.utcnow)


class PageAudit(PageResultBase):
    """Result of a page that was navigated and audited."""

    status: Literal["success"] = "success"
    title: str = Field(default="", description="Document title")
    http_status: int = Field(description="Status of the main navigation response")
    console_messages: List[ConsoleMessage] = Field(default_factory=list)
    failed_requests: List[FailedRequest] = Field(default_factory=list)
    screenshot_path: Optional[str] = None
    performance: Optional[PerformanceMetrics] = None
    accessibility: Optional[List[AccessibilityViolation]] = None
    interactions: Optional[ExplorationResult] = None
    security: Optional[SecurityAudit] = None
    seo: Optional[SeoAudit] = None
    network: Optional[NetworkAnalysis] = None
    discovered_links: List[str] = Field(
        default_factory=list,
        description="Outbound links in DOM order, as resolved by the browser"
    )
    probe_errors: Dict[str, str] = Field(
        default_factory=dict,
        description="Probe name to failure message for probes that degraded to absent"
    )

    @property
    def is_successful(self) -> bool:
        return True

    @property
    def critical_accessibility_issues(self) -> int:
        if not self.accessibility:
            return 0
        return sum(1 for v in self.accessibility if v.is_critical)

    @property
    def broken_link_count(self) -> int:
        if not self.seo:
            return 0
        return len(self.seo.broken_links)


class FailedPage(PageResultBase):
    """Degraded record for a URL that could not be fully processed."""

    status: Literal["failed"] = "failed"
    title: str = CRAWL_ERROR_TITLE
    http_status: int = 0
    reason: str = Field(description="Why the page could not be processed")

    @property
    def is_successful(self) -> bool:
        return False

    @property
    def critical_accessibility_issues(self) -> int:
        return 0

    @property
    def broken_link_count(self) -> int:
        return 0


PageResult = Annotated[Union[PageAudit, FailedPage], Field(discriminator="status")]
