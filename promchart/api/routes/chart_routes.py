#!/usr/bin/env python3
"""
Chart Routes - chart listing, chart views, tooltips and span changes
"""

import logging
from typing import Dict

import pandas as pd
from fastapi import APIRouter, HTTPException, Query

from ...dashboard.controller import ChartController
from ...utils.datetime import format_duration, parse_duration
from ..queries import series_to_frame

logger = logging.getLogger("promchart.server")


def create_chart_routes(charts: Dict[str, ChartController]) -> APIRouter:
    """Create chart-related routes."""
    router = APIRouter()

    def get_chart(name: str) -> ChartController:
        controller = charts.get(name)
        if controller is None:
            raise HTTPException(status_code=404, detail=f"chart not found: {name}")
        return controller

    @router.get("/health")
    def health():
        return {"status": "ok", "charts": len(charts)}

    @router.get("/api/charts")
    def list_charts():
        """List configured charts."""
        return {
            "charts": [
                {
                    "name": c.name,
                    "title": c.title,
                    "graph_type": c.graph_type.value,
                    "span": c.span,
                    "span_text": format_duration(c.span),
                    "samples": c.samples,
                    "poll_delay": c.poll_delay,
                }
                for c in charts.values()
            ]
        }

    @router.get("/api/charts/{name}")
    def chart_data(name: str):
        """Current series, threshold and legend of one chart."""
        return get_chart(name).get_chart_data()

    @router.get("/api/charts/{name}/tooltip")
    def chart_tooltip(
        name: str,
        x: float = Query(...),
        y: float = Query(...),
        width: float = Query(..., gt=0),
        height: float = Query(..., gt=0),
    ):
        """Tooltip for a cursor at (x, y) on a width x height chart."""
        tooltip = get_chart(name).tooltip_at(x, y, width, height)
        return {"tooltip": tooltip.to_dict() if tooltip else None}

    @router.put("/api/charts/{name}/timespan")
    async def set_timespan(name: str, span: str = Query(..., min_length=1)):
        """Change the visible window, e.g. ?span=1h"""
        controller = get_chart(name)
        ms = parse_duration(span)
        if ms <= 0:
            raise HTTPException(status_code=422, detail=f"invalid duration: {span}")
        controller.set_timespan(ms)
        return {
            "name": controller.name,
            "span": controller.span,
            "span_text": format_duration(controller.span),
            "samples": controller.samples,
            "poll_delay": controller.poll_delay,
        }

    @router.get("/api/charts/{name}/frame")
    def chart_frame(name: str):
        """Current series as tidy records (one row per sample)."""
        df = series_to_frame(get_chart(name).get_chart_view().series)
        if "datetime" in df.columns:
            df["datetime"] = df["datetime"].map(lambda t: t.isoformat())
        records = df.astype(object).where(pd.notna(df), None).to_dict("records")
        return {"name": name, "rows": len(records), "records": records}

    return router
