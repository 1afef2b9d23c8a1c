"""Independent audit probes producing one facet of a page result each."""

from .accessibility import AccessibilityProbe, DEFAULT_AXE_SCRIPT_URL, parse_violations
from .content_seo import ContentSeoProbe
from .performance import build_metrics, collect_performance, rate_speed
from .security import audit_headers, audit_security, classify_mixed_content

__all__ = [
    'AccessibilityProbe',
    'DEFAULT_AXE_SCRIPT_URL',
    'parse_violations',
    'ContentSeoProbe',
    'build_metrics',
    'collect_performance',
    'rate_speed',
    'audit_headers',
    'audit_security',
    'classify_mixed_content',
]
