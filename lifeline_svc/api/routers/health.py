"""
Health, readiness, and metrics endpoints for operational visibility.

This module provides:
- /health: Liveness check (is the app running?)
- /ready: Readiness check (is the database reachable?)
- /metrics: Prometheus-compatible metrics

These endpoints take no request data and touch no patient records.
"""
import logging
import time
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from core.dependencies import get_database
from core.middleware import get_metrics_collector
from repositories import Database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health & Observability"])

API_VERSION = "1.0.0"


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class HealthResponse(BaseModel):
    """Response model for /health endpoint."""
    status: str  # "healthy"
    version: str
    timestamp: str  # ISO 8601 UTC


class DependencyStatus(BaseModel):
    """Status of a single dependency."""
    name: str
    status: str  # "ok" or "unavailable"
    latency_ms: Optional[float] = None
    message: Optional[str] = None


class ReadyResponse(BaseModel):
    """Response model for /ready endpoint."""
    status: str  # "ready" or "not_ready"
    dependencies: List[DependencyStatus]
    timestamp: str


class MetricsResponse(BaseModel):
    """Response model for JSON metrics endpoint."""
    http_requests_total: int
    http_requests_2xx_total: int
    http_requests_4xx_total: int
    http_requests_5xx_total: int
    http_request_duration_ms_p50: float
    http_request_duration_ms_p95: float
    http_request_duration_ms_p99: float


def _utc_stamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# =============================================================================
# HEALTH ENDPOINT (LIVENESS)
# =============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Returns immediately without checking dependencies."
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", version=API_VERSION, timestamp=_utc_stamp())


# =============================================================================
# READINESS ENDPOINT
# =============================================================================

def _check_database(db: Database) -> DependencyStatus:
    """Round-trip SELECT 1 through the pool."""
    start = time.perf_counter()
    try:
        db.ping()
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        logger.error("Database health check failed", extra={"error": str(e)})
        return DependencyStatus(
            name="database",
            status="unavailable",
            latency_ms=round(latency_ms, 2),
            message=f"Connection failed: {type(e).__name__}"
        )

    latency_ms = (time.perf_counter() - start) * 1000
    return DependencyStatus(
        name="database",
        status="ok",
        latency_ms=round(latency_ms, 2),
        message=f"{db.backend} connection healthy"
    )


@router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness check",
    description="Verifies the database is reachable. Returns 503 if not."
)
def readiness_check(response: Response, db: Database = Depends(get_database)) -> ReadyResponse:
    db_status = _check_database(db)

    if db_status.status == "unavailable":
        status = "not_ready"
        response.status_code = 503
    else:
        status = "ready"

    return ReadyResponse(status=status, dependencies=[db_status], timestamp=_utc_stamp())


# =============================================================================
# METRICS ENDPOINT
# =============================================================================

@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Request counts by status class and latency percentiles in Prometheus text format."
)
async def get_metrics() -> Response:
    collector = get_metrics_collector()
    return Response(
        content=collector.get_prometheus_format(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@router.get(
    "/metrics/json",
    response_model=MetricsResponse,
    summary="JSON metrics",
)
async def get_metrics_json() -> MetricsResponse:
    return MetricsResponse(**get_metrics_collector().get_summary())
