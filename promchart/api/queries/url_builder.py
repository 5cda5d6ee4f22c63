"""
Prometheus URL construction.

Builds label, rules, instant and range query URLs. Range queries get
start/end/step derived from the end time, timespan and sample budget,
converted to the seconds Prometheus expects.
"""

import logging
import time
from enum import Enum
from typing import Any, List, Optional, Tuple
from urllib.parse import urlencode

from .constants import DEFAULT_SAMPLES, DEFAULT_TIMESPAN

logger = logging.getLogger("promchart.queries")


class PrometheusEndpoint(str, Enum):
    LABEL = "api/v1/label"
    RULES = "api/v1/rules"
    QUERY = "api/v1/query"
    QUERY_RANGE = "api/v1/query_range"


def format_param(value: Any) -> str:
    """Render numbers the way Prometheus parses them (1000, not 1000.0)."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def get_range_vector_params(
    end_time: Optional[float] = None,
    samples: int = DEFAULT_SAMPLES,
    timespan: float = DEFAULT_TIMESPAN
) -> List[Tuple[str, str]]:
    """
    Range vector queries require start, end and step.

    Args:
        end_time: Window end in epoch milliseconds (default: now)
        samples: Number of samples across the window
        timespan: Window length in milliseconds

    Returns:
        Ordered (name, value) pairs in seconds
    """
    if end_time is None:
        end_time = time.time() * 1000
    return [
        ("start", format_param((end_time - timespan) / 1000)),
        ("end", format_param(end_time / 1000)),
        ("step", format_param(timespan / samples / 1000)),
    ]


def get_search_params(
    endpoint: PrometheusEndpoint,
    end_time: Optional[float] = None,
    samples: Optional[int] = None,
    timespan: Optional[float] = None,
    **params: Any
) -> List[Tuple[str, str]]:
    """Range params (for query_range only) followed by all truthy scalar params."""
    if endpoint == PrometheusEndpoint.QUERY_RANGE:
        search_params = get_range_vector_params(
            end_time,
            samples or DEFAULT_SAMPLES,
            timespan or DEFAULT_TIMESPAN,
        )
    else:
        search_params = []

    for key, value in params.items():
        if value:
            search_params.append((key, format_param(value)))
    return search_params


def get_prometheus_url(base_path: str, endpoint: PrometheusEndpoint, **props: Any) -> str:
    """
    Build a Prometheus API URL.

    Args:
        base_path: Prometheus base URL (e.g. http://localhost:9090)
        endpoint: API endpoint kind
        **props: end_time, samples, timespan (range queries) and scalar
            params such as query and timeout

    Returns:
        "<base_path>/<endpoint>?<encoded params>"
    """
    endpoint = PrometheusEndpoint(endpoint)
    params = get_search_params(endpoint, **props)
    url = f"{base_path}/{endpoint.value}?{urlencode(params)}"
    logger.debug(f"Built Prometheus URL: {url}")
    return url
