"""
Background Tasks for Job Analysis

analyze_job runs the full analysis pipeline for one submitted job. The
Job Store is the durability boundary: the task only carries the job id and
every stage result is read from and written to the database.

Each task run gets its own event loop, so the database engine, the OpenAI
client and the Redis connection are created inside that loop and disposed
before it closes.
"""

import asyncio
import logging
import time

from prometheus_client import Counter, Histogram

from app.celery import celery_app

logger = logging.getLogger(__name__)

# ==================== Prometheus Metrics ====================

TASK_DURATION = Histogram(
    "celery_task_duration_seconds",
    "Time spent executing Celery tasks",
    ["task_name"]
)

TASK_FAILURES = Counter(
    "celery_task_failures_total",
    "Number of Celery task failures",
    ["task_name"]
)


async def run_analysis(job_id: str) -> dict:
    """Run the pipeline for one job with per-run connections."""
    from app.config import get_settings
    from app.database import async_session, engine
    from app.services.cache import EmbeddingCache
    from app.services.job_store import JobStore
    from app.services.llm_gateway import build_llm_gateway
    from app.services.pipeline import AnalysisPipeline

    settings = get_settings()
    cache = EmbeddingCache(settings.redis_url)
    gateway = build_llm_gateway(settings, cache=cache)

    try:
        async with async_session() as db:
            pipeline = AnalysisPipeline(
                JobStore(db),
                gateway,
                secondary_min_confidence=settings.secondary_domain_min_confidence,
            )
            result = await pipeline.run(job_id)
    finally:
        await cache.close()
        await gateway.client.close()
        await engine.dispose()

    return {
        "job_id": job_id,
        "status": result.status.value,
        "fit_score": result.fit.score if result.fit else None,
    }


# ==================== Celery Tasks ====================

@celery_app.task(bind=True, max_retries=0, acks_late=True)
def analyze_job(self, job_id: str) -> dict:
    """
    Analyze a submitted job.

    Args:
        job_id: Job UUID, already committed with status QUEUED

    Returns:
        Dict with the job id, terminal status and fit score
    """
    start_time = time.time()

    loop = asyncio.new_event_loop()
    try:
        stats = loop.run_until_complete(run_analysis(job_id))
        logger.info(f"Analyzed job {job_id}: {stats['status']}")
        return stats
    except Exception:
        TASK_FAILURES.labels(task_name="analyze_job").inc()
        raise
    finally:
        loop.close()
        TASK_DURATION.labels(task_name="analyze_job").observe(time.time() - start_time)
