#!/usr/bin/env python3
"""
promchart API Schemas - Pydantic models for Prometheus query responses
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator


class PrometheusResult(BaseModel):
    metric: Dict[str, str] = Field(default_factory=dict)
    values: Optional[List[Tuple[float, Any]]] = None  # range vectors
    value: Optional[Tuple[float, Any]] = None         # instant vectors


class PrometheusData(BaseModel):
    resultType: str = Field("matrix", pattern="^(matrix|vector|scalar|string)$")
    result: List[PrometheusResult] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def wrap_bare_pair(cls, data: Any) -> Any:
        # scalar and string results are a bare [timestamp, value] pair
        if isinstance(data, dict) and data.get("resultType") in ("scalar", "string"):
            pair = data.get("result")
            data = {**data, "result": [{"metric": {}, "value": pair}] if pair else []}
        return data


class PrometheusResponse(BaseModel):
    status: str
    data: Optional[PrometheusData] = None
    errorType: Optional[str] = None
    error: Optional[str] = None
    warnings: Optional[List[str]] = None

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def results(self) -> List[PrometheusResult]:
        return self.data.result if self.data else []
