"""Audit engine package for autoui.

This package provides the crawl orchestrator, the per-page audit pipeline
and the heuristic interaction engine, plus the probes and data models they
share.
"""

from .crawler import Crawler, crawl_viewport, crawl_viewports
from .pipeline import AuditPipeline
from .models.crawl import CrawlConfig, CrawlStats, ExplorerConfig, ViewportProfile
from .models.result import FailedPage, PageAudit, PageResult
from .errors import (
    AuditError,
    ConfigurationError,
    InteractionFailure,
    NavigationError,
    PipelineFailure,
    ProbeFailure,
    UnknownViewportError,
)

__all__ = [
    # Orchestration
    'Crawler',
    'crawl_viewport',
    'crawl_viewports',
    'AuditPipeline',

    # Models
    'CrawlConfig',
    'CrawlStats',
    'ExplorerConfig',
    'ViewportProfile',
    'PageAudit',
    'FailedPage',
    'PageResult',

    # Errors
    'AuditError',
    'ConfigurationError',
    'InteractionFailure',
    'NavigationError',
    'PipelineFailure',
    'ProbeFailure',
    'UnknownViewportError',
]
