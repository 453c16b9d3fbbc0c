"""Unit tests for Prometheus middleware."""
from fastapi import FastAPI
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from courtscout.middleware import PrometheusMiddleware, normalize_path


def build_app():
    app = FastAPI()
    app.add_middleware(PrometheusMiddleware)

    @app.get("/v1/courts/{court_id}")
    def court(court_id: str):
        return {"id": court_id}

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app


def requests_total(*endpoints, status_code="200"):
    total = 0.0
    for endpoint in endpoints:
        value = REGISTRY.get_sample_value(
            "http_requests_total",
            {"method": "GET", "endpoint": endpoint, "status_code": status_code},
        )
        total += value or 0.0
    return total


# Route template when the framework exposes it, normalized path otherwise
COURT_LABELS = ("/v1/courts/{court_id}", "/v1/courts/{id}")


class TestPrometheusMiddleware:
    """Test request instrumentation."""

    def test_normalize_path(self):
        assert normalize_path("/v1/courts/12345") == "/v1/courts/{id}"
        assert normalize_path("/v1/courts/3f2b8c1e-9d4a-4b7e-a1c2-0e5f6d7a8b9c") == "/v1/courts/{id}"
        assert normalize_path("/v1/courts/nearby") == "/v1/courts/nearby"

    def test_counts_requests_per_route(self):
        client = TestClient(build_app())
        before = requests_total(*COURT_LABELS)

        client.get("/v1/courts/101")
        client.get("/v1/courts/202")

        assert requests_total(*COURT_LABELS) == before + 2

    def test_excluded_paths_not_counted(self):
        client = TestClient(build_app())
        before = requests_total("/health")

        client.get("/health")

        assert requests_total("/health") == before
