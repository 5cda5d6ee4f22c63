"""
Time-series shaping for charts.

Converts raw Prometheus [timestamp, "value"] pairs into ordered,
gap-filled samples over the visible window, and derives the window
itself, the sample budget and the threshold line.
"""

import logging
import math
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ...models import LabeledSeries, Sample
from ..schemas import PrometheusResponse, PrometheusResult
from .constants import MAX_SAMPLES, MIN_SAMPLES, MIN_STEP

logger = logging.getLogger("promchart.queries")


def get_x_domain(end_time: float, span: float) -> Tuple[float, float]:
    """X axis domain for the window ending at end_time."""
    return (end_time - span, end_time)


def get_x_ticks(x_domain: Tuple[float, float], count: int) -> List[float]:
    """Evenly spaced axis tick timestamps across x_domain, both ends included."""
    if count < 2:
        return [x_domain[1]]
    return np.linspace(x_domain[0], x_domain[1], count).tolist()


def get_max_samples_for_span(span: float) -> int:
    """Largest sample budget that keeps the step at or above MIN_STEP."""
    return int(min(max(round(span / MIN_STEP), MIN_SAMPLES), MAX_SAMPLES))


def coerce_values(values: Sequence[Sequence[Any]]) -> List[Sample]:
    """
    Convert [epoch_seconds, value] pairs to samples.

    Non-numeric and non-finite readings ("NaN", "+Inf", junk) become gaps;
    their timestamps are kept.
    """
    if not values:
        return []

    frame = pd.DataFrame([(v[0], v[1]) for v in values], columns=["timestamp", "value"])
    timestamps = pd.to_numeric(frame["timestamp"], errors="coerce") * 1000
    numeric = pd.to_numeric(frame["value"], errors="coerce")

    samples = []
    for ts, value in zip(timestamps.tolist(), numeric.tolist()):
        if not math.isfinite(ts):
            logger.debug(f"Dropping sample with invalid timestamp: {ts}")
            continue
        samples.append(Sample(timestamp=ts, value=float(value) if math.isfinite(value) else None))
    return samples


def fill_gaps(samples: List[Sample], samples_budget: int, span: float) -> List[Sample]:
    """
    Insert gap samples where the source returned nothing at all.

    Walks the expected timestamps (first, first + step, ...) below the last
    observed one; wherever the sample at that position is later than
    expected, a (expected, None) sample goes in front of it so the line
    breaks instead of bridging the silence.
    """
    if not samples or not samples_budget or samples_budget <= 0 or span <= 0:
        return samples

    filled = list(samples)
    start = filled[0].timestamp
    end = filled[-1].timestamp
    step = span / samples_budget

    for i, expected in enumerate(np.arange(start, end, step)):
        if i < len(filled) and filled[i].timestamp > expected:
            filled.insert(i, Sample(timestamp=float(expected), value=None))
    return filled


def format_series_values(values: Sequence[Sequence[Any]], samples: int, span: float) -> List[Sample]:
    """Raw Prometheus values -> ordered, gap-filled samples."""
    return fill_gaps(coerce_values(values), samples, span)


def get_threshold_data(threshold: float, span: float, end_time: float) -> List[Sample]:
    """Two-point constant line from end_time - span to end_time."""
    start, end = get_x_domain(end_time, span)
    return [Sample(timestamp=start, value=threshold), Sample(timestamp=end, value=threshold)]


def _result_values(result: PrometheusResult) -> List:
    if result.values is not None:
        return list(result.values)
    if result.value is not None:
        return [result.value]
    return []


def get_series_from_response(
    response: Optional[PrometheusResponse],
    samples: int,
    span: float
) -> List[LabeledSeries]:
    """Transform every result of one query response into a labeled series."""
    if response is None:
        return []
    return [
        LabeledSeries(labels=dict(result.metric), samples=format_series_values(_result_values(result), samples, span))
        for result in response.results
    ]


def series_to_frame(series: Iterable[Any]) -> pd.DataFrame:
    """
    Flatten chart series into a tidy DataFrame.

    Args:
        series: LabeledSeries or ChartSeries objects

    Returns:
        DataFrame with columns: series, timestamp, value plus one column per label
    """
    rows = []
    for i, s in enumerate(series):
        name = getattr(s, "name", None) or str(i)
        for sample in s.samples:
            rows.append({**s.labels, "series": name, "timestamp": sample.timestamp, "value": sample.value})

    if not rows:
        return pd.DataFrame(columns=["series", "timestamp", "value"])

    df = pd.DataFrame(rows)
    df["datetime"] = pd.to_datetime(df["timestamp"], unit="ms")
    return df.sort_values(["series", "timestamp"]).reset_index(drop=True)
