"""
Tests for health, readiness, and metrics endpoints.

These tests verify the observability endpoints work correctly:
- /health: Liveness check
- /ready: Readiness check with a database round trip
- /metrics: Prometheus-format metrics
"""
import json
import logging
from datetime import datetime, timezone
from unittest.mock import MagicMock

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from api.routers import health_router
from core import dependencies as deps
from core.logging_config import JSONFormatter
from core.middleware import (
    LoggingMiddleware,
    MetricsCollector,
    RequestMetrics,
    get_metrics_collector,
)


# =============================================================================
# HEALTH ENDPOINT TESTS (LIVENESS)
# =============================================================================

def test_health_endpoint(client):
    """Test the /health liveness endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == "1.0.0"
    assert data["timestamp"].endswith("Z")


# =============================================================================
# READINESS ENDPOINT TESTS
# =============================================================================

def test_ready_endpoint(client):
    """Test /ready reports ready when the database answers."""
    response = client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert len(data["dependencies"]) == 1

    dep = data["dependencies"][0]
    assert dep["name"] == "database"
    assert dep["status"] == "ok"
    assert dep["message"] == "sqlite connection healthy"


def test_ready_endpoint_database_down():
    """Test /ready returns 503 when the database ping fails."""
    broken_db = MagicMock()
    broken_db.ping.side_effect = OperationalError("SELECT 1", {}, Exception("refused"))

    app = FastAPI()
    app.include_router(health_router)
    app.dependency_overrides[deps.get_database] = lambda: broken_db

    response = TestClient(app).get("/ready")
    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "not_ready"
    assert data["dependencies"][0]["status"] == "unavailable"
    assert data["dependencies"][0]["message"] == "Connection failed: OperationalError"


# =============================================================================
# METRICS ENDPOINT TESTS
# =============================================================================

def test_metrics_endpoint(client):
    """Test the /metrics Prometheus endpoint."""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "text/plain" in response.headers.get("content-type", "")
    content = response.text
    assert "http_requests_total" in content
    assert "http_request_duration_ms" in content


def test_metrics_json_endpoint(client):
    """Test the /metrics/json endpoint."""
    response = client.get("/metrics/json")
    assert response.status_code == 200
    data = response.json()
    assert "http_requests_total" in data
    assert "http_requests_2xx_total" in data
    assert "http_requests_4xx_total" in data
    assert "http_requests_5xx_total" in data
    assert "http_request_duration_ms_p50" in data
    assert "http_request_duration_ms_p95" in data
    assert "http_request_duration_ms_p99" in data


def _request(status_code: int, duration_ms: float) -> RequestMetrics:
    return RequestMetrics(
        timestamp=datetime.now(timezone.utc),
        method="GET",
        route="/api/patients/{patient_id}",
        status_code=status_code,
        duration_ms=duration_ms,
        request_id="abcd1234",
    )


def test_metrics_collector_counts_by_status_class():
    collector = MetricsCollector()
    collector.record_request(_request(200, 5.0))
    collector.record_request(_request(404, 7.0))
    collector.record_request(_request(500, 9.0))

    summary = collector.get_summary()
    assert summary["http_requests_total"] == 3
    assert summary["http_requests_2xx_total"] == 1
    assert summary["http_requests_4xx_total"] == 1
    assert summary["http_requests_5xx_total"] == 1
    assert summary["http_request_duration_ms_p50"] == 7.0


def test_metrics_collector_empty_percentiles():
    assert MetricsCollector().get_latency_percentiles() == {"p50": 0, "p95": 0, "p99": 0}


def test_logging_middleware_sets_request_id(test_app):
    """Responses carry the short request ID generated by the middleware."""
    test_app.add_middleware(LoggingMiddleware)
    response = TestClient(test_app).get("/api/patients")
    assert response.status_code == 200
    assert len(response.headers["X-Request-ID"]) == 8


def test_metrics_collector_counts_by_route_template():
    collector = MetricsCollector()
    collector.record_request(_request(200, 5.0))
    collector.record_request(_request(404, 7.0))

    assert collector.by_route["GET /api/patients/{patient_id}"] == 2
    assert (
        'http_requests_by_route{method="GET",route="/api/patients/{patient_id}"} 2'
        in collector.get_prometheus_format()
    )


def test_logging_middleware_groups_paths_by_route(test_app):
    test_app.add_middleware(LoggingMiddleware)
    collector = get_metrics_collector()
    before = collector.by_route["GET /api/patients/{patient_id}"]

    client = TestClient(test_app)
    client.get("/api/patients/101")
    client.get("/api/patients/102")

    assert collector.by_route["GET /api/patients/{patient_id}"] == before + 2
    assert "GET /api/patients/101" not in collector.by_route


def test_logging_middleware_logs_patient_id(test_app, patient_id, caplog):
    """The completion log names the route template and carries the patient ID."""
    test_app.add_middleware(LoggingMiddleware)
    caplog.set_level(logging.INFO, logger="core.middleware")

    response = TestClient(test_app).get(f"/api/patients/{patient_id}")
    assert response.status_code == 200

    records = [r for r in caplog.records if r.name == "core.middleware"]
    assert len(records) == 1
    record = records[0]
    assert record.getMessage() == "GET /api/patients/{patient_id} -> 200"
    assert str(record.patient_id) == str(patient_id)
    assert record.path == f"/api/patients/{patient_id}"
    assert record.request_id == response.headers["X-Request-ID"]


def test_logging_middleware_warns_with_test_id(test_app, caplog):
    test_app.add_middleware(LoggingMiddleware)
    caplog.set_level(logging.INFO, logger="core.middleware")

    response = TestClient(test_app).get("/api/tests/9999")
    assert response.status_code == 404

    record = [r for r in caplog.records if r.name == "core.middleware"][-1]
    assert record.levelno == logging.WARNING
    assert str(record.test_id) == "9999"
    assert not hasattr(record, "patient_id")


def test_json_formatter_lifts_entity_ids():
    record = logging.LogRecord(
        name="services.lab_test_service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Test cancelled",
        args=(),
        exc_info=None,
    )
    record.test_id = 7
    record.patient_id = 3
    record.request_id = "abcd1234"
    record.status = "Cancelled"

    entry = json.loads(JSONFormatter().format(record))

    assert entry["message"] == "Test cancelled"
    assert entry["test_id"] == 7
    assert entry["patient_id"] == 3
    assert entry["request_id"] == "abcd1234"
    assert entry["extra"] == {"status": "Cancelled"}
    assert entry["timestamp"].endswith("Z")
