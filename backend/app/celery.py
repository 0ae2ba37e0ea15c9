"""
Celery worker for the analysis pipeline

Submission enqueues analyze_job(job_id) and returns immediately; a worker
picks the job up, runs every analysis stage and leaves the outcome in the
database. Only the job id crosses the broker.

Delivery:
    - acks_late + reject_on_worker_lost: a killed worker redelivers the job
    - prefetch 1: one long pipeline run never holds a second job hostage
    - hard time limit: a hung provider call cannot pin a worker forever;
      the stalled-job reaper fails whatever is left in PROCESSING

Usage:
    celery -A app.celery worker -Q analysis --loglevel=info
"""

from celery import Celery
from celery.signals import setup_logging as celery_setup_logging

from app.config import get_settings
from app.logging_config import setup_logging

settings = get_settings()

celery_app = Celery(
    "proposal_pipeline",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    worker_prefetch_multiplier=1,
    worker_concurrency=settings.celery_concurrency,

    # Results are only for debugging; job state lives in the database
    result_expires=3600,

    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=settings.analysis_time_limit_seconds,

    task_default_queue="default",
    task_routes={
        "app.tasks.analysis.analyze_job": {"queue": "analysis"},
    },
)


@celery_setup_logging.connect
def configure_worker_logging(**kwargs):
    # Connecting this signal stops Celery from hijacking the root logger
    setup_logging(settings.log_level)


celery_app.autodiscover_tasks(["app.tasks"])
