"""Report generation and report directory lifecycle."""

from .html_report import build_summary, render_html
from .json_report import load_json, render_json
from .lifecycle import clear_reports, screenshot_dir

__all__ = [
    'build_summary',
    'render_html',
    'render_json',
    'load_json',
    'clear_reports',
    'screenshot_dir',
]
