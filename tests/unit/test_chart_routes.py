"""Unit tests for the chart HTTP routes"""
import asyncio
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from conftest import NOW_SECONDS
from promchart.core.config import ServerConfig
from promchart.core.server import create_app
from promchart.dashboard import ChartController, CustomFetch


@pytest.fixture
def controller(memory_payload):
    controller = ChartController(
        "memory",
        CustomFetch(AsyncMock(return_value=memory_payload)),
        title="Memory",
        timespan=600_000,
        default_samples=10,
        threshold=200,
        clock=lambda: NOW_SECONDS,
    )
    asyncio.run(controller.tick())
    return controller


@pytest.fixture
def client(controller):
    # No lifespan: pollers stay idle, data comes from the tick above
    app = create_app(ServerConfig(), charts={"memory": controller})
    return TestClient(app)


class TestChartRoutes:
    """Test chart API endpoints"""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "charts": 1}

    def test_list_charts(self, client):
        charts = client.get("/api/charts").json()["charts"]
        assert charts == [{
            "name": "memory",
            "title": "Memory",
            "graph_type": "line",
            "span": 600_000,
            "span_text": "10m",
            "samples": 10,
            "poll_delay": 10_000,
        }]

    def test_chart_data(self, client):
        data = client.get("/api/charts/memory").json()
        assert data["series"][0]["name"] == "node_memory{instance=srv01}"
        assert data["series"][0]["data"][3][1] is None
        assert data["threshold"]["value"] == 200
        assert data["legend"][-1]["name"] == "Limit"

    def test_unknown_chart(self, client):
        assert client.get("/api/charts/nope").status_code == 404
        assert client.get("/api/charts/nope/frame").status_code == 404
        assert client.put("/api/charts/nope/timespan", params={"span": "1h"}).status_code == 404

    def test_tooltip(self, client):
        response = client.get("/api/charts/memory/tooltip", params={"x": 415, "y": 200, "width": 800, "height": 350})
        tooltip = response.json()["tooltip"]
        assert tooltip["header"] == "Limit: 200"
        assert [e["formatted_value"] for e in tooltip["entries"]] == ["105"]

    def test_tooltip_hidden(self, client):
        response = client.get("/api/charts/memory/tooltip", params={"x": 415, "y": 330, "width": 800, "height": 350})
        assert response.json() == {"tooltip": None}

    def test_tooltip_requires_size(self, client):
        response = client.get("/api/charts/memory/tooltip", params={"x": 415, "y": 200, "width": 0, "height": 350})
        assert response.status_code == 422

    def test_set_timespan(self, client, controller):
        response = client.put("/api/charts/memory/timespan", params={"span": "1h"})
        assert response.status_code == 200
        assert response.json()["span_text"] == "1h"
        assert controller.span == 3_600_000
        assert controller.samples == 10  # explicit samples kept

    def test_set_timespan_invalid(self, client, controller):
        response = client.put("/api/charts/memory/timespan", params={"span": "soon"})
        assert response.status_code == 422
        assert controller.span == 600_000

    def test_frame(self, client):
        data = client.get("/api/charts/memory/frame").json()
        assert data["rows"] == 11
        record = data["records"][3]
        assert record["series"] == "node_memory{instance=srv01}"
        assert record["instance"] == "srv01"
        assert record["value"] is None
        assert record["datetime"].startswith("2023-11-14T22:")


class TestLifespan:
    def test_pollers_start_and_stop(self, memory_payload):
        producer = AsyncMock(return_value=memory_payload)
        controller = ChartController("memory", CustomFetch(producer), poll_interval=60_000)
        app = create_app(ServerConfig(), charts={"memory": controller})

        with TestClient(app) as client:
            assert controller.poller.running
            assert client.get("/health").status_code == 200

        assert controller.closed
        assert not controller.poller.running
