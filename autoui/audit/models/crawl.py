"""Pydantic models for crawl configuration and crawl bookkeeping.

This module defines the immutable configuration shared by the crawl
orchestrator and the heuristic interaction engine, the viewport profile
description, and the statistics collected over one crawl.
"""

import re
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_EXCLUDED_EXTENSIONS = (
    "zip", "pdf", "png", "jpg", "jpeg", "gif", "svg",
    "exe", "mp4", "mp3", "avi", "mov",
)


class CrawlConfig(BaseModel):
    """Configuration for one crawl orchestrator instance.

    The model is frozen: it is validated once when the orchestrator is
    constructed and never merged or mutated while the crawl runs.
    """

    model_config = ConfigDict(frozen=True)

    max_depth: int = Field(
        default=2,
        ge=0,
        description="Maximum link depth from the seed URL (0 = seed only)"
    )

    max_links_per_page: int = Field(
        default=2,
        ge=0,
        description="Maximum number of outbound links followed from one page"
    )

    excluded_extensions: Tuple[str, ...] = Field(
        default=DEFAULT_EXCLUDED_EXTENSIONS,
        description="File extensions of non-HTML resources that are never explored"
    )

    page_deadline_seconds: Optional[float] = Field(
        default=120.0,
        gt=0,
        description="Overall deadline for auditing a single page (None = no deadline)"
    )

    navigation_timeout_ms: int = Field(
        default=30000,
        ge=1000,
        le=300000,
        description="Timeout for the navigation call in milliseconds"
    )

    @field_validator('excluded_extensions')
    @classmethod
    def normalize_extensions(cls, v):
        """Strip leading dots and lowercase extensions."""
        return tuple(ext.lower().lstrip('.') for ext in v if ext and ext.strip('.'))


class ExplorerConfig(BaseModel):
    """Configuration for the heuristic interaction engine."""

    model_config = ConfigDict(frozen=True)

    max_inputs_to_fill: int = Field(
        default=10,
        ge=0,
        description="Cap on text-like inputs filled and on checkboxes/radios checked"
    )

    max_action_buttons: int = Field(
        default=3,
        ge=0,
        description="Number of matching action buttons considered for a click"
    )

    action_button_keywords: str = Field(
        default=r"(login|sign in|next|continue|submit|ok|accept|buy|add to cart)",
        description="Case-insensitive regex matched against button accessible names"
    )

    overlay_keywords: str = Field(
        default=r"^(Accept|OK|Got it|I agree|Akceptuję|Zgoda|Rozumiem)",
        description="Case-insensitive regex for overlay/cookie banner dismiss buttons"
    )

    overlay_wait_ms: int = Field(
        default=1000,
        ge=0,
        description="Time to let transient overlays render before looking for them"
    )

    action_timeout_ms: int = Field(
        default=3000,
        ge=100,
        description="Timeout for a single click/fill/check attempt"
    )

    number_min: int = Field(default=1, description="Lower bound for synthetic numbers")
    number_max: int = Field(default=100, description="Upper bound for synthetic numbers")

    @field_validator('action_button_keywords', 'overlay_keywords')
    @classmethod
    def validate_regex(cls, v):
        """Validate that keyword patterns compile."""
        try:
            re.compile(v, re.IGNORECASE)
        except re.error as e:
            raise ValueError(f"Invalid regex pattern '{v}': {e}")
        return v

    @property
    def action_button_pattern(self) -> re.Pattern:
        return re.compile(self.action_button_keywords, re.IGNORECASE)

    @property
    def overlay_pattern(self) -> re.Pattern:
        return re.compile(self.overlay_keywords, re.IGNORECASE)


class ViewportProfile(BaseModel):
    """A named device/display simulation for one independent crawl.

    Either ``device`` names a Playwright device descriptor or ``viewport``
    gives an explicit window size.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Viewport identifier used to tag results")
    device: Optional[str] = Field(
        default=None,
        description="Playwright device descriptor name (e.g. 'iPhone 13 Pro')"
    )
    viewport: Optional[Dict[str, int]] = Field(
        default=None,
        description="Explicit viewport size with 'width' and 'height'"
    )


class CrawlStats(BaseModel):
    """Statistics tracking for one orchestrator run."""

    viewport: str = Field(description="Viewport the crawl ran under")
    pages_attempted: int = Field(default=0, description="Pages handed to the pipeline")
    pages_succeeded: int = Field(default=0, description="Pages with a full audit")
    pages_failed: int = Field(default=0, description="Pages recorded as degraded results")
    links_discovered: int = Field(default=0, description="Raw outbound links seen")
    links_skipped: int = Field(default=0, description="Links filtered out before truncation")
    start_time: Optional[datetime] = Field(default=None, description="Crawl start time")
    end_time: Optional[datetime] = Field(default=None, description="Crawl end time")

    @property
    def duration(self) -> Optional[float]:
        """Calculate crawl duration in seconds."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def export_summary(self) -> Dict[str, Any]:
        """Export a summary of the crawl for logging."""
        return {
            "viewport": self.viewport,
            "pages_attempted": self.pages_attempted,
            "pages_succeeded": self.pages_succeeded,
            "pages_failed": self.pages_failed,
            "links_discovered": self.links_discovered,
            "links_skipped": self.links_skipped,
            "duration_seconds": self.duration,
        }
