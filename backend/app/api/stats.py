from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.database import get_db
from app.models import Job, JobStatus, User
from app.auth import get_current_user

router = APIRouter()


@router.get("")
async def get_stats(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    # Jobs by status - single GROUP BY query instead of N+1
    status_query = (
        select(Job.status, func.count(Job.id))
        .where(Job.user_id == user.id)
        .group_by(Job.status)
    )
    status_result = await db.execute(status_query)
    status_counts = {row[0]: row[1] for row in status_result.all()}
    # Ensure all statuses are present with default 0
    for job_status in JobStatus:
        status_counts.setdefault(job_status.value, 0)

    # Average fit score over scored jobs
    avg_result = await db.execute(
        select(func.avg(Job.fit_score)).where(Job.user_id == user.id, Job.fit_score.is_not(None))
    )
    avg_fit_score = round(avg_result.scalar() or 0, 1)

    return {
        "total_jobs": sum(status_counts.values()),
        "jobs_by_status": status_counts,
        "avg_fit_score": avg_fit_score,
    }
