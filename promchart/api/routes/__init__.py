"""HTTP route factories."""

from .chart_routes import create_chart_routes

__all__ = ['create_chart_routes']
