"""
Tests for the Prometheus request middleware

Requests go through a real FastAPI app with an included router, the same
layout main.py uses.
"""

import pytest
import pytest_asyncio
from fastapi import APIRouter, FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient
from prometheus_client import REGISTRY

from app.middleware.metrics import route_template, setup_metrics


def request_count(method: str, route: str, status: str) -> float:
    labels = {"method": method, "route": route, "status": status}
    return REGISTRY.get_sample_value("http_requests_total", labels) or 0.0


@pytest.fixture
def metered_app():
    router = APIRouter()

    @router.get("/{item_id}")
    async def read_item(item_id: str):
        return {"id": item_id}

    @router.post("/{item_id}/archive")
    async def archive_item(item_id: str):
        raise HTTPException(status_code=409, detail="Already archived")

    app = FastAPI()
    setup_metrics(app)
    app.include_router(router, prefix="/items")

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


@pytest_asyncio.fixture
async def client(metered_app):
    async with AsyncClient(transport=ASGITransport(app=metered_app), base_url="http://test") as client:
        yield client


class TestRouteTemplate:
    """Test label derivation from the routed scope."""

    def test_path_parameter_replaced(self):
        scope = {"path": "/jobs/abc-123/proposal", "endpoint": object(), "path_params": {"job_id": "abc-123"}}
        assert route_template(scope) == "/jobs/{job_id}/proposal"

    def test_static_route_kept(self):
        assert route_template({"path": "/stats", "endpoint": object(), "path_params": {}}) == "/stats"

    def test_unrouted_request(self):
        assert route_template({"path": "/nope/123"}) == "unmatched"


class TestMiddleware:
    """Test metrics recorded for requests through an included router."""

    @pytest.mark.asyncio
    async def test_included_route_labelled_by_template(self, client):
        before = request_count("GET", "/items/{item_id}", "200")

        response = await client.get("/items/42")

        assert response.status_code == 200
        assert request_count("GET", "/items/{item_id}", "200") == before + 1

    @pytest.mark.asyncio
    async def test_error_status_recorded(self, client):
        before = request_count("POST", "/items/{item_id}/archive", "409")

        response = await client.post("/items/7/archive")

        assert response.status_code == 409
        assert request_count("POST", "/items/{item_id}/archive", "409") == before + 1

    @pytest.mark.asyncio
    async def test_unknown_path_is_unmatched(self, client):
        before = request_count("GET", "unmatched", "404")

        response = await client.get("/missing/path")

        assert response.status_code == 404
        assert request_count("GET", "unmatched", "404") == before + 1

    @pytest.mark.asyncio
    async def test_health_not_metered(self, client):
        before = request_count("GET", "/health", "200")

        await client.get("/health")

        assert request_count("GET", "/health", "200") == before

    @pytest.mark.asyncio
    async def test_metrics_endpoint(self, client):
        await client.get("/items/1")

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text
