"""
Dashboard package

Organized by concern:
- controller.py: ChartController, per-chart state and ticking
- tooltip.py: cursor matching and tooltip selection
- config.py: palette, chart geometry and tooltip limits
"""

from .config import GraphType
from .controller import ChartController, ChartState, CustomFetch, FetchOptions, StructuredFetch
from .tooltip import Tooltip, find_active_points, select_tooltip

__all__ = [
    # Controller
    'ChartController',
    'ChartState',
    'CustomFetch',
    'FetchOptions',
    'StructuredFetch',
    'GraphType',

    # Tooltip
    'Tooltip',
    'find_active_points',
    'select_tooltip',
]
