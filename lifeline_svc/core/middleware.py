"""
FastAPI middleware for observability.

This module provides:
- Request/Response logging with request_id propagation
- Patient/test/doctor IDs from the matched route attached to request logs
- In-memory metrics per route template, exposed by /metrics

Middleware Stack Order (in main.py):
    1. LoggingMiddleware (outermost - captures everything)
    2. CORS Middleware
    3. Application routes and the static bundle
"""

import logging
import time
import uuid
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from core.logging_config import ENTITY_ID_FIELDS, set_request_id, clear_request_id

logger = logging.getLogger(__name__)

# Requests that matched no API route (static assets, 404s)
UNMATCHED_ROUTE = "<unmatched>"


# =============================================================================
# IN-MEMORY METRICS COLLECTOR
# =============================================================================

@dataclass
class RequestMetrics:
    """One finished request, keyed by route template rather than raw path."""
    timestamp: datetime
    method: str
    route: str
    status_code: int
    duration_ms: float
    request_id: str


@dataclass
class MetricsCollector:
    """
    In-memory metrics collector.

    Latency percentiles come from the last 1000 requests. Totals are kept per
    status class and per "METHOD /route/{template}", so
    /api/patients/1 and /api/patients/2 share one counter.
    """
    _requests: Deque[RequestMetrics] = field(default_factory=lambda: deque(maxlen=1000))

    total_requests: int = 0
    total_2xx: int = 0
    total_4xx: int = 0
    total_5xx: int = 0
    by_route: Counter = field(default_factory=Counter)

    def record_request(self, metrics: RequestMetrics) -> None:
        self._requests.append(metrics)
        self.total_requests += 1
        self.by_route[f"{metrics.method} {metrics.route}"] += 1

        if 200 <= metrics.status_code < 300:
            self.total_2xx += 1
        elif 400 <= metrics.status_code < 500:
            self.total_4xx += 1
        elif 500 <= metrics.status_code < 600:
            self.total_5xx += 1

    def get_latency_percentiles(self) -> Dict[str, float]:
        """p50/p95/p99 in milliseconds; 0 for each before any request."""
        if not self._requests:
            return {"p50": 0, "p95": 0, "p99": 0}

        durations = sorted(r.duration_ms for r in self._requests)
        n = len(durations)

        def percentile(p: float) -> float:
            return durations[min(int(n * p / 100), n - 1)]

        return {
            "p50": round(percentile(50), 2),
            "p95": round(percentile(95), 2),
            "p99": round(percentile(99), 2),
        }

    def get_summary(self) -> Dict:
        """Get metrics summary for the /metrics endpoints."""
        latencies = self.get_latency_percentiles()

        return {
            "http_requests_total": self.total_requests,
            "http_requests_2xx_total": self.total_2xx,
            "http_requests_4xx_total": self.total_4xx,
            "http_requests_5xx_total": self.total_5xx,
            "http_request_duration_ms_p50": latencies["p50"],
            "http_request_duration_ms_p95": latencies["p95"],
            "http_request_duration_ms_p99": latencies["p99"],
        }

    def get_prometheus_format(self) -> str:
        """Export metrics in Prometheus text format."""
        summary = self.get_summary()
        lines = [
            "# HELP http_requests_total Total HTTP requests",
            "# TYPE http_requests_total counter",
            f'http_requests_total {summary["http_requests_total"]}',
            "",
            "# HELP http_requests_by_status HTTP requests by status category",
            "# TYPE http_requests_by_status counter",
            f'http_requests_by_status{{status="2xx"}} {summary["http_requests_2xx_total"]}',
            f'http_requests_by_status{{status="4xx"}} {summary["http_requests_4xx_total"]}',
            f'http_requests_by_status{{status="5xx"}} {summary["http_requests_5xx_total"]}',
            "",
            "# HELP http_requests_by_route HTTP requests by method and route template",
            "# TYPE http_requests_by_route counter",
        ]
        for key, count in sorted(self.by_route.items()):
            method, route = key.split(" ", 1)
            lines.append(f'http_requests_by_route{{method="{method}",route="{route}"}} {count}')
        lines += [
            "",
            "# HELP http_request_duration_ms Request duration in milliseconds",
            "# TYPE http_request_duration_ms gauge",
            f'http_request_duration_ms{{quantile="0.5"}} {summary["http_request_duration_ms_p50"]}',
            f'http_request_duration_ms{{quantile="0.95"}} {summary["http_request_duration_ms_p95"]}',
            f'http_request_duration_ms{{quantile="0.99"}} {summary["http_request_duration_ms_p99"]}',
        ]
        return "\n".join(lines) + "\n"


metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector instance."""
    return metrics_collector


# =============================================================================
# LOGGING MIDDLEWARE
# =============================================================================

def route_template(request: Request) -> str:
    """Path template of the matched route, e.g. /api/tests/{test_id}."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


def entity_ids(request: Request) -> Dict[str, Any]:
    """Patient/test/doctor IDs captured from the matched route's path."""
    path_params = request.scope.get("path_params") or {}
    return {name: path_params[name] for name in ENTITY_ID_FIELDS if name in path_params}


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request/Response logging middleware with request_id propagation.

    - Generates a short request_id for each request
    - Logs /api/* requests, tagged with the entity IDs in their path
    - Records metrics for every request
    - Adds X-Request-ID header to responses
    """

    def _should_log(self, path: str) -> bool:
        return path.startswith("/api/")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())[:8]
        set_request_id(request_id)

        method = request.method
        path = request.url.path
        start_time = time.perf_counter()

        if self._should_log(path):
            logger.debug("Request started", extra={"method": method, "path": path})

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            logger.exception(
                "Request failed with exception",
                extra={"method": method, "path": path, "error": str(e)}
            )
            raise
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            clear_request_id()

        # Routing fills scope["route"] and scope["path_params"] during call_next
        route = route_template(request)
        metrics_collector.record_request(RequestMetrics(
            timestamp=datetime.now(timezone.utc),
            method=method,
            route=route,
            status_code=status_code,
            duration_ms=duration_ms,
            request_id=request_id,
        ))

        if self._should_log(path):
            log_level = logging.WARNING if status_code >= 400 else logging.INFO
            logger.log(
                log_level,
                f"{method} {route} -> {status_code}",
                extra={
                    "request_id": request_id,
                    "path": path,
                    "status_code": status_code,
                    "duration_ms": round(duration_ms, 2),
                    **entity_ids(request),
                }
            )

        response.headers["X-Request-ID"] = request_id
        return response
