"""
Prometheus query helpers

Organized by concern:
- url_builder.py: endpoint kinds and query URL construction
- timeseries.py: sample coercion, gap filling, threshold line, sample budget
- labels.py: series naming from label sets
- constants.py: sample budget and polling limits
"""

from .url_builder import PrometheusEndpoint, get_prometheus_url
from .timeseries import (
    format_series_values,
    get_max_samples_for_span,
    get_series_from_response,
    get_threshold_data,
    get_x_domain,
    get_x_ticks,
    series_to_frame,
)
from .labels import format_labels, get_series_name, template_series_title
from .constants import MAX_SAMPLES, MIN_POLL_INTERVAL, MIN_SAMPLES, MIN_STEP, QUERY_TIMEOUT

__all__ = [
    # URLs
    'PrometheusEndpoint',
    'get_prometheus_url',

    # Series transformation
    'format_series_values',
    'get_max_samples_for_span',
    'get_series_from_response',
    'get_threshold_data',
    'get_x_domain',
    'get_x_ticks',
    'series_to_frame',

    # Labels
    'format_labels',
    'get_series_name',
    'template_series_title',

    # Constants
    'MAX_SAMPLES',
    'MIN_POLL_INTERVAL',
    'MIN_SAMPLES',
    'MIN_STEP',
    'QUERY_TIMEOUT',
]
