#!/usr/bin/env python3
"""
promchart data model - samples, labeled series and chart view structures.

All timestamps are epoch milliseconds. A sample value of None is a gap:
the series had no usable reading at that timestamp.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Sample:
    """Single plotted point; value None marks a gap."""
    timestamp: float
    value: Optional[float] = None

    @property
    def is_gap(self) -> bool:
        return self.value is None

    def to_pair(self) -> List:
        return [self.timestamp, self.value]


@dataclass
class LabeledSeries:
    """Series identity (Prometheus labels) and its ordered samples."""
    labels: Dict[str, str] = field(default_factory=dict)
    samples: List[Sample] = field(default_factory=list)


@dataclass
class ThresholdData:
    """Constant reference line drawn across the visible window."""
    threshold: float
    samples: List[Sample]
    threshold_text: Optional[str] = None

    @property
    def label(self) -> str:
        return self.threshold_text or "Limit"


@dataclass
class LegendEntry:
    name: str
    color: Optional[str] = None
    symbol_type: Optional[str] = None


@dataclass
class ChartSeries:
    """A labeled series resolved for display: name, color and samples."""
    name: str
    color: str
    labels: Dict[str, str]
    samples: List[Sample]


@dataclass
class ChartView:
    """Everything the rendering surface needs for one frame."""
    series: List[ChartSeries]
    legend: List[LegendEntry]
    x_domain: Tuple[float, float]
    span: float
    samples: int
    is_stack: bool = False
    show_legend: bool = False
    threshold: Optional[ThresholdData] = None
    updated_at: Optional[float] = None
