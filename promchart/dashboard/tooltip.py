"""
Tooltip selection

Decides whether a tooltip is shown for a cursor position, which series
values it lists and where the box goes. Matching the cursor to the nearest
sample timestamp lives here too, so the HTTP API can answer tooltip
requests without a browser-side chart library.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..models import ChartView
from ..utils.datetime import format_datetime_with_seconds, is_valid_instant
from ..utils.humanize import format_value
from .config import (
    CHART_PADDING,
    DEFAULT_THRESHOLD_TEXT,
    TOOLTIP_DISTANCE_DIVISOR,
    TOOLTIP_MAX_ENTRIES,
    TOOLTIP_MAX_HEIGHT,
    TOOLTIP_MAX_WIDTH,
)

logger = logging.getLogger("promchart.tooltip")


@dataclass
class Point:
    x: float
    y: float


@dataclass
class ActivePoint:
    """Value of one series at the matched timestamp."""
    x: Any                      # datetime of the matched sample
    y: Optional[float]
    y1: Optional[float] = None  # cumulative top for stacked charts


@dataclass
class PointStyle:
    fill: Optional[str] = None
    name: Optional[str] = None


@dataclass
class TooltipEntry:
    name: str
    color: Optional[str]
    value: float
    total: float

    @property
    def formatted_value(self) -> str:
        return format_value(self.value)


@dataclass
class Tooltip:
    header: str
    entries: List[TooltipEntry]
    x: float
    y: float
    width: float
    height: float
    is_on_left: bool
    line: Tuple[float, float, float, float]  # x1, y1, x2, y2
    time: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "header": self.header,
            "time": self.time.isoformat() if self.time else None,
            "entries": [
                {
                    "name": e.name,
                    "color": e.color,
                    "value": e.value,
                    "total": e.total,
                    "formatted_value": e.formatted_value,
                }
                for e in self.entries
            ],
            "box": {"x": self.x, "y": self.y, "width": self.width, "height": self.height},
            "is_on_left": self.is_on_left,
            "line": {"x1": self.line[0], "y1": self.line[1], "x2": self.line[2], "y2": self.line[3]},
        }


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def get_tooltip_header(time: datetime, threshold: Optional[float] = None, threshold_text: Optional[str] = None) -> str:
    if threshold:
        return f"{threshold_text or DEFAULT_THRESHOLD_TEXT}: {format_value(threshold)}"
    return format_datetime_with_seconds(time)


def select_tooltip(
    active_points: Optional[Sequence[ActivePoint]],
    center: Optional[Point],
    height: Optional[float],
    width: Optional[float],
    x: Optional[float],
    style: Optional[Sequence[Optional[PointStyle]]],
    threshold: Optional[float] = None,
    threshold_text: Optional[str] = None
) -> Optional[Tooltip]:
    """
    Build the tooltip for a cursor position, or None to hide it.

    Args:
        active_points: Per-series values at the matched timestamp
        center: Pixel position of the matched point (y follows the cursor)
        height: Chart height in pixels
        width: Chart width in pixels
        x: Cursor x in pixels
        style: Per-series color and display name, aligned with active_points
        threshold: Threshold value; when set the header shows it instead of the time
        threshold_text: Threshold label (default "Limit")

    Returns:
        Tooltip or None
    """
    if not active_points or center is None or not height or not width or not style or x is None:
        return None

    time = active_points[0].x
    if not is_valid_instant(time) or not _is_finite_number(x):
        return None

    # Cursor too far from the matched points, e.g. inside a range with no data
    if abs(x - center.x) > width / TOOLTIP_DISTANCE_DIVISOR:
        return None

    # Cursor over the top padding or the legend band
    if height - center.y <= CHART_PADDING["bottom"] or center.y <= CHART_PADDING["top"]:
        return None

    max_width = min(width / 2 + 60, TOOLTIP_MAX_WIDTH)
    is_on_left = x > (width - 40) / 2

    entries = []
    for i, point in enumerate(active_points):
        point_style = style[i] if i < len(style) else None
        name = point_style.name if point_style else None
        # Series with no data here, and unnamed series (threshold), are skipped
        if point.y is None or name is None:
            continue
        total = point.y1 if point.y1 is not None else point.y
        entries.append(TooltipEntry(name=name, color=point_style.fill, value=point.y, total=total))

    entries.sort(key=lambda e: e.total, reverse=True)

    return Tooltip(
        header=get_tooltip_header(time, threshold, threshold_text),
        entries=entries[:TOOLTIP_MAX_ENTRIES],
        x=x - max_width if is_on_left else x,
        y=center.y - TOOLTIP_MAX_HEIGHT / 2,
        width=max_width,
        height=TOOLTIP_MAX_HEIGHT,
        is_on_left=is_on_left,
        line=(x, CHART_PADDING["top"], x, height - CHART_PADDING["bottom"]),
        time=time,
    )


def find_active_points(
    view: ChartView,
    cursor_x: float,
    cursor_y: float,
    width: float,
    height: float
) -> Tuple[List[ActivePoint], Optional[Point], List[PointStyle]]:
    """
    Match a cursor position to the nearest sample timestamp.

    Only non-gap samples are candidates, so a cursor inside a gap matches
    a distant point and select_tooltip() hides the tooltip.

    Returns:
        (active_points, center, style); empty lists and None center when
        there is nothing to match
    """
    plot_left = CHART_PADDING["left"]
    plot_width = width - CHART_PADDING["left"] - CHART_PADDING["right"]
    start, end = view.x_domain
    if plot_width <= 0 or end <= start or not view.series:
        return [], None, []

    cursor_ts = start + (cursor_x - plot_left) / plot_width * (end - start)

    nearest = None
    for series in view.series:
        for sample in series.samples:
            if sample.is_gap:
                continue
            if nearest is None or abs(sample.timestamp - cursor_ts) < abs(nearest - cursor_ts):
                nearest = sample.timestamp
    if nearest is None:
        return [], None, []

    matched_time = datetime.fromtimestamp(nearest / 1000)
    active_points = []
    style = []
    running_total = 0.0
    for series in view.series:
        value = next((s.value for s in series.samples if s.timestamp == nearest), None)
        y1 = None
        if view.is_stack and value is not None:
            running_total += value
            y1 = running_total
        active_points.append(ActivePoint(x=matched_time, y=value, y1=y1))
        style.append(PointStyle(fill=series.color, name=series.name))

    center = Point(x=plot_left + (nearest - start) / (end - start) * plot_width, y=cursor_y)
    logger.debug(f"Cursor at {cursor_x:.0f}px matched {matched_time.isoformat()}")
    return active_points, center, style
