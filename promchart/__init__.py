"""
promchart - live Prometheus charts

Polls Prometheus range queries, turns the samples into gap-aware chart
series and serves them, together with tooltip selections, over a small
FastAPI app.
"""

__version__ = "0.3.0"
