"""Error taxonomy for the crawl and audit pipeline.

Failures local to a single probe or interaction stage are recovered where
they happen; failures that prevent establishing the page itself surface as
PipelineFailure and are turned into degraded results by the orchestrator.
"""

from typing import Optional


class AuditError(Exception):
    """Base class for all audit errors."""
    pass


class NavigationError(AuditError):
    """Raised when a page cannot be navigated to or returns no response."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Navigation to {url} failed: {reason}")


class PipelineFailure(AuditError):
    """Raised when the per-page pipeline cannot produce a full result."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Audit pipeline failed for {url}: {reason}")


class ProbeFailure(AuditError):
    """An isolated failure of one audit probe."""

    def __init__(self, probe: str, url: str, cause: Optional[BaseException] = None):
        self.probe = probe
        self.url = url
        self.cause = cause
        message = f"{probe} probe failed for {url}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class InteractionFailure(AuditError):
    """An isolated failure of one heuristic interaction stage."""

    def __init__(self, stage: str, cause: Optional[BaseException] = None):
        self.stage = stage
        self.cause = cause
        super().__init__(f"Interaction stage '{stage}' failed: {cause}")


class UnknownViewportError(AuditError):
    """Raised when a viewport profile name is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown viewport name: {name}")


class ConfigurationError(AuditError):
    """Raised when configuration cannot be loaded or validated."""
    pass
