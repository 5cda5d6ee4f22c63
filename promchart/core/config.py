#!/usr/bin/env python3
"""
promchart Server Configuration Management

Charts are declared in YAML. Durations (timespan, poll_interval) accept
duration text such as "30m" or plain milliseconds.

Environment (.env is loaded too):
    PROMCHART_CONFIG     config file used when none is given
    PROMETHEUS_URL       default Prometheus base URL for charts without base_path
    PROMCHART_LOG_LEVEL  overrides log_level
"""

import logging
import math
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..api.queries.constants import DEFAULT_TIMESPAN, MAX_SAMPLES, MIN_SAMPLES
from ..dashboard.config import GraphType
from ..utils.datetime import parse_duration

logger = logging.getLogger("promchart.server")

DEFAULT_PROMETHEUS_URL = "http://localhost:9090"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def coerce_duration(value: Any) -> Optional[float]:
    """Duration text or milliseconds -> milliseconds; None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return float(text)
        ms = parse_duration(text)
        return float(ms) if ms > 0 else None
    if isinstance(value, (int, float)) and math.isfinite(value):
        return float(value)
    return None


class ChartConfig(BaseModel):
    name: str
    title: Optional[str] = None
    base_path: Optional[str] = None       # defaults to ServerConfig.prometheus_url
    queries: List[str] = Field(default_factory=list)
    samples: Optional[int] = None          # explicit sample budget
    timespan: float = DEFAULT_TIMESPAN     # ms
    poll_interval: Optional[float] = None  # ms, None derives from timespan
    graph_type: GraphType = GraphType.LINE
    threshold: Optional[float] = None
    threshold_text: Optional[str] = None
    series_title: Optional[str] = None     # str.format template over labels + index
    show_legend: bool = False
    request_timeout: float = 30            # seconds
    headers: Dict[str, str] = Field(default_factory=dict)

    @field_validator("timespan", mode="before")
    @classmethod
    def validate_timespan(cls, value: Any) -> float:
        ms = coerce_duration(value)
        if ms is None or ms <= 0:
            logger.warning(f"Invalid timespan {value!r}, using default {DEFAULT_TIMESPAN}ms")
            return DEFAULT_TIMESPAN
        return ms

    @field_validator("poll_interval", mode="before")
    @classmethod
    def validate_poll_interval(cls, value: Any) -> Optional[float]:
        if value is None:
            return None
        ms = coerce_duration(value)
        if ms is None or ms <= 0:
            logger.warning(f"Invalid poll_interval {value!r}, deriving from timespan")
            return None
        return ms

    @field_validator("samples")
    @classmethod
    def clamp_samples(cls, value: Optional[int]) -> Optional[int]:
        if value is None:
            return None
        clamped = min(max(value, MIN_SAMPLES), MAX_SAMPLES)
        if clamped != value:
            logger.warning(f"samples {value} out of range, using {clamped}")
        return clamped

    @field_validator("queries", mode="before")
    @classmethod
    def wrap_single_query(cls, value: Any) -> Any:
        return [value] if isinstance(value, str) else value


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    prometheus_url: str = DEFAULT_PROMETHEUS_URL
    charts: List[ChartConfig] = Field(default_factory=list)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            logger.warning(f"Unknown log_level {value!r}, using INFO")
            return "INFO"
        return level

    @model_validator(mode="after")
    def resolve_charts(self) -> "ServerConfig":
        seen = set()
        for chart in self.charts:
            if not chart.base_path:
                chart.base_path = self.prometheus_url
            chart.base_path = chart.base_path.rstrip("/")

            if chart.name in seen:
                n = 2
                while f"{chart.name}-{n}" in seen:
                    n += 1
                logger.warning(f"Duplicate chart name {chart.name!r}, renamed to {chart.name}-{n}")
                chart.name = f"{chart.name}-{n}"
            seen.add(chart.name)
        return self


def _apply_env(data: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(data)
    prometheus_url = os.getenv("PROMETHEUS_URL")
    if prometheus_url and not data.get("prometheus_url"):
        data["prometheus_url"] = prometheus_url
    log_level = os.getenv("PROMCHART_LOG_LEVEL")
    if log_level:
        data["log_level"] = log_level
    return data


def load_config_from(path: str) -> ServerConfig:
    """Load server configuration from YAML file."""
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return ServerConfig(**_apply_env(data))


def load_config(config_path: Optional[str] = None) -> ServerConfig:
    """
    Load configuration with simple fallbacks.

    Priority:
    1. Provided config_path (errors propagate)
    2. Environment variable PROMCHART_CONFIG
    3. ./config.yaml (if exists)
    4. Defaults
    """
    load_dotenv()

    if config_path:
        logger.info(f"Loading configuration from: {config_path}")
        return load_config_from(config_path)

    for config_file in (os.getenv("PROMCHART_CONFIG"), "./config.yaml"):
        if not config_file or not Path(config_file).exists():
            continue
        try:
            logger.info(f"Loading configuration from: {config_file}")
            return load_config_from(config_file)
        except (OSError, ValueError, yaml.YAMLError, ValidationError) as e:
            logger.warning(f"Failed to load config from {config_file}: {e}")

    logger.info("Using default configuration")
    return ServerConfig(**_apply_env({}))
