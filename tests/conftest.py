"""Pytest configuration and shared fixtures"""
import pytest

from promchart.api.schemas import PrometheusResponse

# Fixed "now" for controllers: 2023-11-14T22:13:20Z
NOW_SECONDS = 1_700_000_000.0
NOW_MS = NOW_SECONDS * 1000


def make_matrix(*series, status="success"):
    """Build a Prometheus range query payload from (labels, values) pairs."""
    return {
        "status": status,
        "data": {
            "resultType": "matrix",
            "result": [{"metric": labels, "values": values} for labels, values in series],
        },
    }


def regular_values(start_seconds, count, step_seconds=60, value=1.0):
    """[[ts, "value"], ...] at a fixed step, values as Prometheus strings."""
    return [[start_seconds + i * step_seconds, str(value + i)] for i in range(count)]


@pytest.fixture
def clock():
    """Clock returning NOW_SECONDS"""
    return lambda: NOW_SECONDS


@pytest.fixture
def cpu_payload():
    """Two series over the 10 minutes before NOW, one sample per minute"""
    start = NOW_SECONDS - 600
    return make_matrix(
        ({"__name__": "node_cpu", "instance": "srv01"}, regular_values(start, 11, value=1.0)),
        ({"__name__": "node_cpu", "instance": "srv02"}, regular_values(start, 11, value=10.0)),
    )


@pytest.fixture
def memory_payload():
    """Single series with a NaN reading"""
    start = NOW_SECONDS - 600
    values = regular_values(start, 11, value=100.0)
    values[3][1] = "NaN"
    return make_matrix(({"__name__": "node_memory", "instance": "srv01"}, values))


@pytest.fixture
def cpu_response(cpu_payload):
    return PrometheusResponse.model_validate(cpu_payload)


@pytest.fixture
def error_payload():
    return {"status": "error", "errorType": "bad_data", "error": "parse error at char 4"}
