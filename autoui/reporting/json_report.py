"""Structured JSON dump of crawl results."""

import json
import logging
from pathlib import Path
from typing import List, Sequence, Union

from pydantic import TypeAdapter

from ..audit.models.result import PageResult
from .lifecycle import JSON_REPORT_NAME

logger = logging.getLogger(__name__)


_results_adapter = TypeAdapter(List[PageResult])


def render_json(results: Sequence[PageResult], output_dir: Union[Path, str]) -> Path:
    """Write ``report.json`` with every page result.

    Args:
        results: Page results of all viewports
        output_dir: Report directory

    Returns:
        Path of the written file
    """
    output = Path(output_dir) / JSON_REPORT_NAME
    output.parent.mkdir(parents=True, exist_ok=True)

    data = _results_adapter.dump_python(list(results), mode="json")
    with output.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    logger.info(f"Results saved to {output}")
    return output


def load_json(path: Union[Path, str]) -> List[PageResult]:
    """Read results back from a ``report.json`` file."""
    return _results_adapter.validate_json(Path(path).read_text(encoding="utf-8"))
