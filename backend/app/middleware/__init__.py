"""
Middleware Package

Prometheus request metrics and the metric helpers used by the pipeline,
the LLM gateway, the vector index and the embedding cache.
"""

from app.middleware.metrics import (
    PrometheusMiddleware,
    setup_metrics,
    STAGE_FALLBACKS,
    PIPELINE_OUTCOMES,
)

__all__ = [
    "PrometheusMiddleware",
    "setup_metrics",
    "STAGE_FALLBACKS",
    "PIPELINE_OUTCOMES",
]
