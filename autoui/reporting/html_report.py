"""HTML report rendering with Jinja2."""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..audit.models.result import PageResult
from .lifecycle import HTML_REPORT_NAME

logger = logging.getLogger(__name__)


TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "report.html.j2"


def build_summary(results: Sequence[PageResult]) -> Dict[str, Any]:
    """Headline numbers shown above the results table."""
    total_issues = sum(
        len(r.accessibility or []) for r in results if r.is_successful
    )
    return {
        "page_count": len(results),
        "failed_count": sum(1 for r in results if not r.is_successful),
        "total_accessibility_issues": total_issues,
        "critical_accessibility_issues": sum(r.critical_accessibility_issues for r in results),
        "broken_links": sum(r.broken_link_count for r in results),
        "viewports": sorted({r.viewport for r in results}),
        "report_date": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
    }


def _relative_to(path: Optional[str], base: Path) -> str:
    if not path:
        return ""
    return os.path.relpath(path, base).replace("\\", "/")


def render_html(
    results: Sequence[PageResult],
    output_dir: Union[Path, str],
    template_dir: Union[Path, str] = TEMPLATE_DIR,
) -> Path:
    """Render ``report.html`` into the report directory.

    Args:
        results: Page results of all viewports
        output_dir: Report directory; screenshot links are made relative to it
        template_dir: Directory holding ``report.html.j2``

    Returns:
        Path of the written file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / HTML_REPORT_NAME

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "html.j2", "xml"]),
    )
    env.filters["relative"] = lambda path: _relative_to(path, output_dir)
    template = env.get_template(TEMPLATE_NAME)

    html_content = template.render(summary=build_summary(results), results=list(results))
    output_path.write_text(html_content, encoding="utf-8")

    logger.info(f"HTML report generated at: {output_path}")
    return output_path
