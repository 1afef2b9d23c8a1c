"""Report directory lifecycle."""

import logging
import shutil
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


SCREENSHOTS_DIRNAME = "screenshots"
JSON_REPORT_NAME = "report.json"
HTML_REPORT_NAME = "report.html"


def screenshot_dir(output_dir: Union[Path, str]) -> Path:
    """Directory screenshots of a report run are written to."""
    return Path(output_dir) / SCREENSHOTS_DIRNAME


def clear_reports(output_dir: Union[Path, str]) -> Path:
    """Prepare ``output_dir`` for a new run.

    Empties (or creates) the screenshots directory and removes stale
    JSON and HTML reports. Other files in ``output_dir`` are left alone.

    Returns:
        The screenshots directory
    """
    output_dir = Path(output_dir)
    screenshots = screenshot_dir(output_dir)

    if screenshots.exists():
        shutil.rmtree(screenshots)
    screenshots.mkdir(parents=True, exist_ok=True)

    for name in (JSON_REPORT_NAME, HTML_REPORT_NAME):
        stale = output_dir / name
        if stale.exists():
            stale.unlink()

    logger.info(f"Cleared previous reports in '{output_dir}'")
    return screenshots
