"""Unit tests for server/chart configuration loading"""
import os
from unittest.mock import patch

import pytest
import yaml

from promchart.core.config import (
    ChartConfig,
    ServerConfig,
    coerce_duration,
    load_config,
    load_config_from,
)
from promchart.dashboard.config import GraphType

CONFIG = {
    "port": 9000,
    "prometheus_url": "http://prom:9090/",
    "charts": [
        {
            "name": "cpu",
            "queries": ["rate(node_cpu_seconds_total[5m])"],
            "timespan": "1h",
            "poll_interval": "15s",
            "graph_type": "area",
        },
        {
            "name": "cpu",
            "base_path": "http://other:9090",
            "queries": "up",
            "samples": 1000,
        },
    ],
}


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(CONFIG))
    return path


@pytest.fixture
def clean_env():
    with patch.dict(os.environ, {}, clear=True):
        yield


class TestCoerceDuration:
    @pytest.mark.parametrize("value,expected", [
        ("30m", 1_800_000),
        ("1h 30m", 5_400_000),
        ("60000", 60_000),
        (60_000, 60_000),
        (1.5, 1.5),
        ("garbage", None),
        ("", None),
        (None, None),
        (True, None),
        (float("nan"), None),
    ])
    def test_coerce(self, value, expected):
        assert coerce_duration(value) == expected


class TestChartConfig:
    """Test chart config normalization"""

    def test_defaults(self):
        chart = ChartConfig(name="c")
        assert chart.timespan == 1_800_000
        assert chart.poll_interval is None
        assert chart.samples is None
        assert chart.graph_type == GraphType.LINE
        assert chart.queries == []

    @pytest.mark.parametrize("timespan", ["garbage", 0, -5, "0s"])
    def test_invalid_timespan_uses_default(self, timespan):
        assert ChartConfig(name="c", timespan=timespan).timespan == 1_800_000

    def test_invalid_poll_interval_derives(self):
        assert ChartConfig(name="c", poll_interval="soon").poll_interval is None
        assert ChartConfig(name="c", poll_interval=-1).poll_interval is None

    @pytest.mark.parametrize("samples,expected", [(1000, 300), (1, 10), (60, 60)])
    def test_samples_clamped(self, samples, expected):
        assert ChartConfig(name="c", samples=samples).samples == expected

    def test_invalid_graph_type(self):
        with pytest.raises(ValueError):
            ChartConfig(name="c", graph_type="pie")


class TestLoadConfig:
    """Test YAML + environment loading"""

    def test_load_config_from(self, config_file, clean_env):
        config = load_config_from(str(config_file))

        assert config.port == 9000
        cpu, other = config.charts
        assert cpu.timespan == 3_600_000
        assert cpu.poll_interval == 15_000
        assert cpu.graph_type == GraphType.AREA
        assert cpu.base_path == "http://prom:9090"
        assert other.base_path == "http://other:9090"
        assert other.queries == ["up"]
        assert other.samples == 300

    def test_duplicate_names_renamed(self, config_file, clean_env):
        config = load_config_from(str(config_file))
        assert [c.name for c in config.charts] == ["cpu", "cpu-2"]

    def test_environment_overrides(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"charts": [{"name": "up", "queries": ["up"]}]}))
        env = {"PROMETHEUS_URL": "http://env-prom:9090", "PROMCHART_LOG_LEVEL": "debug"}

        with patch.dict(os.environ, env, clear=True):
            config = load_config_from(str(path))

        assert config.prometheus_url == "http://env-prom:9090"
        assert config.charts[0].base_path == "http://env-prom:9090"
        assert config.log_level == "DEBUG"

    def test_file_url_wins_over_environment(self, config_file):
        with patch.dict(os.environ, {"PROMETHEUS_URL": "http://env-prom:9090"}, clear=True):
            config = load_config_from(str(config_file))
        assert config.prometheus_url == "http://prom:9090/"

    def test_config_from_environment_variable(self, config_file, tmp_path, monkeypatch, clean_env):
        monkeypatch.chdir(tmp_path.parent)
        os.environ["PROMCHART_CONFIG"] = str(config_file)

        config = load_config()

        assert len(config.charts) == 2

    def test_defaults_without_file(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.chdir(tmp_path)

        config = load_config()

        assert config == ServerConfig()
        assert config.charts == []

    def test_explicit_missing_path_raises(self, tmp_path, clean_env):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_broken_fallback_file_skipped(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config.yaml").write_text("charts: [unclosed")

        config = load_config()

        assert config.charts == []

    def test_top_level_must_be_mapping(self, tmp_path, clean_env):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            load_config_from(str(path))

    def test_unknown_log_level(self, clean_env):
        assert ServerConfig(log_level="chatty").log_level == "INFO"
