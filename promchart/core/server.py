#!/usr/bin/env python3
"""
promchart FastAPI application factory
"""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI

from .. import __version__
from ..api.routes import create_chart_routes
from ..dashboard.controller import ChartController
from .config import ServerConfig

logger = logging.getLogger("promchart.server")


def build_charts(config: ServerConfig) -> Dict[str, ChartController]:
    """One controller per configured chart, keyed by name."""
    charts = {}
    for chart_config in config.charts:
        charts[chart_config.name] = ChartController.from_config(chart_config)
        logger.info(f"Registered chart {chart_config.name} ({len(chart_config.queries)} queries)")
    return charts


def create_app(config: ServerConfig, charts: Optional[Dict[str, ChartController]] = None) -> FastAPI:
    """
    Create the FastAPI app.

    Pollers start with the app and stop on shutdown.

    Args:
        config: Server configuration
        charts: Prebuilt controllers (default: built from config.charts)
    """
    if charts is None:
        charts = build_charts(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        for controller in charts.values():
            controller.start()
        logger.info(f"promchart started with {len(charts)} charts")
        try:
            yield
        finally:
            for controller in charts.values():
                controller.close()
            logger.info("promchart stopped")

    app = FastAPI(title="promchart", version=__version__, lifespan=lifespan)
    app.state.charts = charts
    app.include_router(create_chart_routes(charts))
    return app
