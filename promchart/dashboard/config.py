"""
Dashboard Configuration

Chart geometry, palette and tooltip limits shared by the chart
controller and the tooltip selector. Values are fixed at import time.
"""

from enum import Enum


class GraphType(str, Enum):
    AREA = "area"   # stacked
    LINE = "line"


# Series palette, assigned in order and reused once exhausted
CHART_COLORS = (
    "#06c", "#4cb140", "#009596", "#5752d1", "#f4c145", "#ec7a08",
    "#7d1007", "#b8bbbe", "#8bc1f7", "#23511e", "#a2d9d9", "#2a265f",
    "#f9e0a2", "#8f4700", "#c9190b", "#004b95", "#38812f", "#005f60",
)
THRESHOLD_COLOR = "#4f5255"
DEFAULT_THRESHOLD_TEXT = "Limit"

# Plot area padding in pixels; the bottom band holds the legend
CHART_HEIGHT = 350
CHART_PADDING = {
    "top": 25,
    "bottom": 110,
    "left": 90,
    "right": 60,
}

# Number of labeled ticks on the time axis
X_TICK_COUNT = 6

TOOLTIP_MAX_ENTRIES = 20
TOOLTIP_MAX_WIDTH = 300
TOOLTIP_MAX_HEIGHT = 400

# Cursor must be within width / TOOLTIP_DISTANCE_DIVISOR of the matched point
TOOLTIP_DISTANCE_DIVISOR = 15


def get_series_color(index: int) -> str:
    return CHART_COLORS[index % len(CHART_COLORS)]
