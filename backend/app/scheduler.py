"""
Background Scheduler - stalled job reaper

A pipeline run that dies mid-way (worker killed, host lost) leaves its job
in PROCESSING forever. The reaper runs periodically with APScheduler and
moves every job that has sat in PROCESSING longer than
`stalled_job_minutes` to FAILED. Jobs are not re-run; whatever stage output
was already persisted stays in place for inspection.

Default Schedule: every 10 minutes (configurable via REAPER_INTERVAL_MINUTES)
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import select

from app.config import get_settings
from app.database import async_session
from app.middleware.metrics import PIPELINE_OUTCOMES
from app.models import Job, JobStatus

logger = logging.getLogger(__name__)

settings = get_settings()
scheduler = AsyncIOScheduler()


async def reap_stalled_jobs(session_factory=async_session, stalled_minutes: Optional[int] = None) -> int:
    """
    Fail jobs stuck in PROCESSING.

    Returns:
        Number of jobs moved to FAILED
    """
    minutes = stalled_minutes if stalled_minutes is not None else settings.stalled_job_minutes
    cutoff = datetime.utcnow() - timedelta(minutes=minutes)

    async with session_factory() as db:
        result = await db.execute(
            select(Job).where(
                Job.status == JobStatus.PROCESSING.value,
                Job.updated_at < cutoff,
            )
        )
        stalled = result.scalars().all()

        for job in stalled:
            job.status = JobStatus.FAILED.value
            logger.warning(f"Job {job.id} stalled in PROCESSING since {job.updated_at}; marked FAILED")

        if stalled:
            await db.commit()
            PIPELINE_OUTCOMES.labels(status="STALLED").inc(len(stalled))

    return len(stalled)


def start_scheduler():
    """Start the background scheduler"""
    scheduler.add_job(
        reap_stalled_jobs,
        trigger=IntervalTrigger(minutes=settings.reaper_interval_minutes),
        id="reap_stalled_jobs",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(f"Scheduler started: reaping stalled jobs every {settings.reaper_interval_minutes} minutes")


def stop_scheduler():
    """Stop the background scheduler"""
    scheduler.shutdown()
