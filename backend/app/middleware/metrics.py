"""
Prometheus metrics for the API process and the analysis pipeline

HTTP:
    http_request_duration_seconds / http_requests_total by route template
    http_requests_in_flight
Pipeline:
    pipeline_stage_fallbacks_total{stage}  - persona, router, extractor, critic
    pipeline_outcomes_total{status}        - COMPLETED, REJECTED, FAILED, STALLED
    pipeline_duration_seconds
Dependencies:
    llm_call_seconds / llm_call_failures_total
    vector_query_seconds
    cache_hits_total / cache_misses_total

The Celery worker records into its own process registry; the API exposes
GET /metrics for the API process only.
"""

import time
import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    CONTENT_TYPE_LATEST,
    generate_latest,
    REGISTRY,
)
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

UNMETERED_PATHS = frozenset({"/metrics", "/health"})

# ==================== Prometheus Metrics ====================

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "route", "status"],
    # Proposal and chat requests wait on the LLM
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0]
)

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "route", "status"]
)

REQUESTS_IN_FLIGHT = Gauge(
    "http_requests_in_flight",
    "HTTP requests currently being served",
    ["method"]
)

# LLM gateway metrics
LLM_CALL_LATENCY = Histogram(
    "llm_call_seconds",
    "LLM provider call latency",
    ["operation"],  # generate, embed
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0]
)

LLM_CALL_FAILURES = Counter(
    "llm_call_failures_total",
    "LLM provider call failures",
    ["operation", "kind"]  # kind: safety_block, error
)

# Pipeline metrics
STAGE_FALLBACKS = Counter(
    "pipeline_stage_fallbacks_total",
    "Analysis stages that degraded to their fallback value",
    ["stage"]  # persona, router, extractor, critic
)

PIPELINE_OUTCOMES = Counter(
    "pipeline_outcomes_total",
    "Analysis pipeline runs by terminal status",
    ["status"]
)

PIPELINE_DURATION = Histogram(
    "pipeline_duration_seconds",
    "Wall time of one analysis pipeline run",
    buckets=[1.0, 2.5, 5.0, 10.0, 20.0, 40.0, 80.0, 160.0]
)

# Vector database metrics
VECTOR_QUERY_LATENCY = Histogram(
    "vector_query_seconds",
    "Vector database query latency",
    ["operation"],  # query, upsert, delete, update
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5]
)

# Cache metrics
CACHE_HITS = Counter(
    "cache_hits_total",
    "Total cache hits",
    ["layer"]
)

CACHE_MISSES = Counter(
    "cache_misses_total",
    "Total cache misses",
    ["layer"]
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Times every request and labels it with its route template."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in UNMETERED_PATHS:
            return await call_next(request)

        method = request.method
        status = "500"

        REQUESTS_IN_FLIGHT.labels(method=method).inc()
        start = time.perf_counter()
        try:
            response = await call_next(request)
            status = str(response.status_code)
            return response
        finally:
            duration = time.perf_counter() - start
            # Routing has filled in endpoint and path_params by now
            route = route_template(request.scope)
            REQUEST_LATENCY.labels(method=method, route=route, status=status).observe(duration)
            REQUEST_COUNT.labels(method=method, route=route, status=status).inc()
            REQUESTS_IN_FLIGHT.labels(method=method).dec()


def route_template(scope: dict) -> str:
    """
    /jobs/{job_id} rather than the concrete path, to bound label cardinality.

    Built from the path parameters the router resolved, so it does not
    depend on how included routers are laid out in app.routes.
    """
    if "endpoint" not in scope and "route" not in scope:
        return "unmatched"

    segments = scope["path"].split("/")
    for name, value in scope.get("path_params", {}).items():
        value = str(value)
        # Rightmost match: parameters follow the static prefix
        for i in range(len(segments) - 1, -1, -1):
            if segments[i] == value:
                segments[i] = "{%s}" % name
                break
    return "/".join(segments)


def metrics_endpoint(request: Request) -> Response:
    return PlainTextResponse(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


def setup_metrics(app: FastAPI) -> None:
    app.add_middleware(PrometheusMiddleware)
    app.add_route("/metrics", metrics_endpoint, methods=["GET"])
    logger.info("Prometheus metrics configured")


# ==================== Helper Functions ====================

def record_cache_hit(layer: str) -> None:
    CACHE_HITS.labels(layer=layer).inc()


def record_cache_miss(layer: str) -> None:
    CACHE_MISSES.labels(layer=layer).inc()


def record_llm_latency(operation: str, duration: float) -> None:
    LLM_CALL_LATENCY.labels(operation=operation).observe(duration)


def record_llm_failure(operation: str, kind: str) -> None:
    LLM_CALL_FAILURES.labels(operation=operation, kind=kind).inc()


def record_stage_fallback(stage: str) -> None:
    STAGE_FALLBACKS.labels(stage=stage).inc()


def record_pipeline_outcome(status: str, duration: float) -> None:
    PIPELINE_OUTCOMES.labels(status=status).inc()
    PIPELINE_DURATION.observe(duration)


def record_vector_query_latency(operation: str, duration: float) -> None:
    VECTOR_QUERY_LATENCY.labels(operation=operation).observe(duration)
