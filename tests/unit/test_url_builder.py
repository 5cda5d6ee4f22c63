"""Unit tests for Prometheus URL construction"""
from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

import pytest

from promchart.api.queries import PrometheusEndpoint, get_prometheus_url
from promchart.api.queries.url_builder import format_param, get_range_vector_params


def query_params(url):
    return {k: v[0] for k, v in parse_qs(urlsplit(url).query).items()}


class TestRangeQueryUrl:
    """Test range query parameter derivation"""

    def test_start_end_step_in_seconds(self):
        url = get_prometheus_url(
            "http://prom:9090",
            PrometheusEndpoint.QUERY_RANGE,
            end_time=1_000_000,
            timespan=1_800_000,
            samples=60,
            query="up",
            timeout="30s",
        )
        params = query_params(url)

        assert url.startswith("http://prom:9090/api/v1/query_range?")
        assert params["start"] == "-800"
        assert params["end"] == "1000"
        assert params["step"] == "30"
        assert params["query"] == "up"
        assert params["timeout"] == "30s"

    def test_window_matches_span(self):
        params = dict(get_range_vector_params(end_time=1_700_000_000_000, samples=120, timespan=3_600_000))
        assert float(params["end"]) - float(params["start"]) == 3600
        assert float(params["step"]) == 30

    def test_param_order(self):
        url = get_prometheus_url("http://p", PrometheusEndpoint.QUERY_RANGE, end_time=60_000, query="up")
        assert [k.split("=")[0] for k in urlsplit(url).query.split("&")] == ["start", "end", "step", "query"]

    def test_end_time_defaults_to_now(self):
        with patch("promchart.api.queries.url_builder.time") as mock_time:
            mock_time.time.return_value = 1000.0
            params = dict(get_range_vector_params(timespan=60_000, samples=10))
        assert params["end"] == "1000"
        assert params["start"] == "940"
        assert params["step"] == "6"

    def test_query_is_encoded(self):
        url = get_prometheus_url(
            "http://p",
            PrometheusEndpoint.QUERY_RANGE,
            end_time=60_000,
            query='sum(rate(x{job="a b"}[5m]))',
        )
        assert " " not in url
        assert query_params(url)["query"] == 'sum(rate(x{job="a b"}[5m]))'


class TestOtherEndpoints:
    def test_instant_query_has_no_range(self):
        params = query_params(get_prometheus_url("http://p", PrometheusEndpoint.QUERY, query="up", end_time=5))
        assert params == {"query": "up"}

    def test_endpoint_given_as_string(self):
        url = get_prometheus_url("http://p", "api/v1/rules")
        assert url == "http://p/api/v1/rules?"

    def test_falsy_params_omitted(self):
        params = query_params(get_prometheus_url("http://p", PrometheusEndpoint.QUERY, query="up", timeout="", limit=0))
        assert params == {"query": "up"}

    def test_unknown_endpoint_rejected(self):
        with pytest.raises(ValueError):
            get_prometheus_url("http://p", "api/v1/nope")


class TestFormatParam:
    @pytest.mark.parametrize("value,expected", [
        (30.0, "30"),
        (-800.0, "-800"),
        (2.5, "2.5"),
        (7, "7"),
        (True, "true"),
        ("30s", "30s"),
    ])
    def test_format(self, value, expected):
        assert format_param(value) == expected
