"""Audit data models package."""

from .crawl import (
    CrawlConfig,
    ExplorerConfig,
    ViewportProfile,
    CrawlStats,
    DEFAULT_EXCLUDED_EXTENSIONS,
)

from .result import (
    CRAWL_ERROR_TITLE,
    SpeedRating,
    InteractionOutcome,
    InteractionStage,
    ConsoleMessage,
    FailedRequest,
    PerformanceRating,
    PerformanceMetrics,
    AccessibilityViolation,
    InteractionAction,
    ExplorationResult,
    HeaderAudit,
    MixedContent,
    SecurityAudit,
    BrokenLink,
    ImageAnalysis,
    SeoAudit,
    ResourceInfo,
    NetworkAnalysis,
    PageAudit,
    FailedPage,
    PageResult,
)

__all__ = [
    # Crawl models
    'CrawlConfig',
    'ExplorerConfig',
    'ViewportProfile',
    'CrawlStats',
    'DEFAULT_EXCLUDED_EXTENSIONS',

    # Result models
    'CRAWL_ERROR_TITLE',
    'SpeedRating',
    'InteractionOutcome',
    'InteractionStage',
    'ConsoleMessage',
    'FailedRequest',
    'PerformanceRating',
    'PerformanceMetrics',
    'AccessibilityViolation',
    'InteractionAction',
    'ExplorationResult',
    'HeaderAudit',
    'MixedContent',
    'SecurityAudit',
    'BrokenLink',
    'ImageAnalysis',
    'SeoAudit',
    'ResourceInfo',
    'NetworkAnalysis',
    'PageAudit',
    'FailedPage',
    'PageResult',
]
