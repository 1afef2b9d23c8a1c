"""Browser capture layer: browser lifecycle, navigation and passive observers."""

from .browser_factory import BrowserConfig, BrowserEngineType, BrowserFactory
from .monitor import PageMonitor
from .navigation import extract_links, get_title, is_http_url, navigate
from .network_observer import NetworkAnalyzer
from .screenshot import capture_screenshot
from .viewports import VIEWPORT_PROFILES, get_viewport, parse_viewport_list, resolve_viewports

__all__ = [
    'BrowserConfig',
    'BrowserEngineType',
    'BrowserFactory',
    'PageMonitor',
    'NetworkAnalyzer',
    'navigate',
    'get_title',
    'extract_links',
    'is_http_url',
    'capture_screenshot',
    'VIEWPORT_PROFILES',
    'get_viewport',
    'parse_viewport_list',
    'resolve_viewports',
]
