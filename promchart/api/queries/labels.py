"""
Series label formatting.

Turns Prometheus label sets into display names for legends and tooltips.
"""

import logging
from collections import defaultdict
from typing import Callable, Dict, Optional

logger = logging.getLogger("promchart.queries")

FormatSeriesTitle = Callable[[Dict[str, str], int], str]


def format_labels(labels: Optional[Dict[str, str]] = None) -> str:
    """Default series name: metric{label=value,...}."""
    labels = labels or {}
    name = labels.get("__name__", "")
    other_labels = ",".join(f"{k}={v}" for k, v in labels.items() if k != "__name__")
    return f"{name}{{{other_labels}}}"


def template_series_title(template: str) -> FormatSeriesTitle:
    """
    Build a series naming function from a str.format template.

    The template sees every label plus ``index`` (the query position);
    unknown fields render as empty strings, e.g. "cpu{cpu}" -> "cpu3".
    """
    def format_series_title(labels: Dict[str, str], index: int = 0) -> str:
        fields = defaultdict(str, labels)
        fields["index"] = index
        try:
            return template.format_map(fields)
        except (ValueError, IndexError, AttributeError) as e:
            logger.warning(f"Invalid series title template {template!r}: {e}")
            return format_labels(labels)

    return format_series_title


def get_series_name(
    labels: Optional[Dict[str, str]],
    index: int,
    format_series_title: Optional[FormatSeriesTitle] = None
) -> str:
    if labels is not None and format_series_title:
        return format_series_title(labels, index)
    return format_labels(labels)
