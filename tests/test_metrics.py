"""Tests for the metrics collector and request pipeline middleware."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi import FastAPI
from structlog.testing import capture_logs
from fastapi.testclient import TestClient

from mathapi.metrics.collector import MetricsCollector, MetricSample
from mathapi.pipeline import (
    UNMATCHED_ROUTE,
    LoggingMiddleware,
    MetricsMiddleware,
    RecoveryMiddleware,
    build_middleware,
)


class TestMetricsCollector:
    def test_observe_counts_by_method_path_status(self):
        metrics = MetricsCollector()

        metrics.observe("POST", "/multiply", 200, 0.01)
        metrics.observe("POST", "/multiply", 200, 0.02)
        metrics.observe("POST", "/multiply", 401, 0.001)

        assert metrics.sample_value(
            "http_requests_total", {"method": "POST", "path": "/multiply", "status": "200"}
        ) == 2.0
        assert metrics.sample_value(
            "http_requests_total", {"method": "POST", "path": "/multiply", "status": "401"}
        ) == 1.0

    def test_histogram_keyed_by_method_and_path(self):
        metrics = MetricsCollector()

        metrics.observe("POST", "/divide", 200, 0.2)
        metrics.observe("POST", "/divide", 400, 0.3)

        labels = {"method": "POST", "path": "/divide"}
        assert metrics.sample_value("http_request_duration_seconds_count", labels) == 2.0
        assert metrics.sample_value("http_request_duration_seconds_sum", labels) == pytest.approx(0.5)
        assert metrics.sample_value(
            "http_request_duration_seconds_bucket", {**labels, "le": "0.25"}
        ) == 1.0

    def test_unknown_sample_is_none(self):
        assert MetricsCollector().sample_value("http_requests_total", {"method": "GET"}) is None

    def test_registries_are_independent(self):
        first, second = MetricsCollector(), MetricsCollector()
        first.observe("GET", "/metrics", 200, 0.0)

        assert second.sample_value(
            "http_requests_total", {"method": "GET", "path": "/metrics", "status": "200"}
        ) is None

    def test_concurrent_observations(self):
        metrics = MetricsCollector()

        def hammer(_):
            for _ in range(250):
                metrics.observe("POST", "/factorial", 200, 0.001)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(hammer, range(8)))

        assert metrics.sample_value(
            "http_requests_total", {"method": "POST", "path": "/factorial", "status": "200"}
        ) == 2000.0

    def test_snapshot(self):
        metrics = MetricsCollector()
        metrics.observe("POST", "/login", 200, 0.05)

        snapshot = metrics.snapshot()

        assert all(isinstance(sample, MetricSample) for sample in snapshot)
        assert MetricSample(
            "http_requests_total", {"method": "POST", "path": "/login", "status": "200"}, 1.0
        ) in snapshot

    def test_render_exposition(self):
        metrics = MetricsCollector()
        metrics.observe("GET", "/health", 200, 0.01)
        metrics.record_audit_failure("multiply", "timeout")

        text = metrics.render().decode()

        assert "# TYPE http_requests_total counter" in text
        assert 'http_requests_total{method="GET",path="/health",status="200"} 1.0' in text
        assert "http_request_duration_seconds_bucket" in text
        assert 'audit_write_failures_total{operation="multiply",reason="timeout"} 1.0' in text
        assert metrics.content_type.startswith("text/plain")


class TestPipelineMiddleware:
    """Recovery and metrics middleware on a bare app."""

    @pytest.fixture
    def metrics(self):
        return MetricsCollector()

    @pytest.fixture
    def client(self, metrics):
        app = FastAPI(middleware=build_middleware(metrics))

        @app.get("/items/{item_id}")
        async def read_item(item_id: int):
            return {"item_id": item_id}

        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        return TestClient(app)

    def test_records_route_template_not_raw_path(self, client, metrics):
        client.get("/items/1")
        client.get("/items/2")

        assert metrics.sample_value(
            "http_requests_total", {"method": "GET", "path": "/items/{item_id}", "status": "200"}
        ) == 2.0

    def test_unmatched_routes_share_one_label(self, client, metrics):
        assert client.get("/nope").status_code == 404
        assert client.get("/also/nope").status_code == 404

        assert metrics.sample_value(
            "http_requests_total", {"method": "GET", "path": UNMATCHED_ROUTE, "status": "404"}
        ) == 2.0

    def test_failure_recovered_as_500(self, client, metrics):
        response = client.get("/boom")

        assert response.status_code == 500
        assert response.json() == {"error": "internal server error"}
        assert "kaboom" not in response.text
        assert metrics.sample_value(
            "http_requests_total", {"method": "GET", "path": "/boom", "status": "500"}
        ) == 1.0

    def test_server_keeps_serving_after_failure(self, client):
        assert client.get("/boom").status_code == 500
        assert client.get("/items/7").json() == {"item_id": 7}

    def test_chain_order(self, metrics):
        classes = [m.cls for m in build_middleware(metrics)]
        assert classes == [RecoveryMiddleware, LoggingMiddleware, MetricsMiddleware]


class TestRequestLogging:
    """One request_completed event per request."""

    @pytest.fixture
    def client(self):
        app = FastAPI(middleware=build_middleware(MetricsCollector()))

        @app.get("/items/{item_id}")
        async def read_item(item_id: int):
            return {"item_id": item_id}

        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        return TestClient(app)

    @staticmethod
    def _completed(logs):
        return [entry for entry in logs if entry["event"] == "request_completed"]

    def test_logs_route_status_and_duration(self, client):
        with capture_logs() as logs:
            client.get("/items/3")

        (entry,) = self._completed(logs)
        assert entry["method"] == "GET"
        assert entry["path"] == "/items/{item_id}"
        assert entry["status"] == 200
        assert entry["duration_ms"] >= 0
        assert entry["log_level"] == "info"

    def test_logs_unmatched_route(self, client):
        with capture_logs() as logs:
            client.get("/nope")

        (entry,) = self._completed(logs)
        assert entry["path"] == UNMATCHED_ROUTE
        assert entry["status"] == 404

    def test_logs_failure_as_500(self, client):
        with capture_logs() as logs:
            client.get("/boom")

        (entry,) = self._completed(logs)
        assert entry["status"] == 500
        assert any(e["event"] == "unhandled_exception" for e in logs)
