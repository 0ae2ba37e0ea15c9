"""
Job Store - persistence of jobs and their stage outputs

All writes are scoped to one job id and committed immediately, so each
pipeline stage's output is durable before the next stage begins. Status
writes are checked against the job state machine.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import AnalysisOutput, Job, JobStatus, User
from app.models.job import can_transition
from app.schemas.analysis import DomainRouting, FitDecision, Persona, RequirementsMatrix
from app.services.errors import InvalidStatusTransitionError, JobNotFoundError

logger = logging.getLogger(__name__)


def _dump(model) -> dict:
    return model.model_dump(by_alias=True, mode="json")


class JobStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ==================== Reads ====================

    async def get_job(self, job_id: str) -> Optional[Job]:
        result = await self.session.execute(select(Job).where(Job.id == job_id))
        return result.scalar_one_or_none()

    async def get_owned_job(self, job_id: str, user_id: str) -> Job:
        job = await self.get_job(job_id)
        if job is None or job.user_id != user_id:
            raise JobNotFoundError(job_id)
        return job

    async def list_jobs(self, user_id: str) -> List[Job]:
        result = await self.session.execute(
            select(Job).where(Job.user_id == user_id).order_by(Job.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_analysis(self, job_id: str) -> Optional[AnalysisOutput]:
        result = await self.session.execute(
            select(AnalysisOutput).where(AnalysisOutput.job_id == job_id)
        )
        return result.scalar_one_or_none()

    async def get_user(self, user_id: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    # ==================== Writes ====================

    async def _commit(self, *objects) -> None:
        await self.session.commit()
        for obj in objects:
            await self.session.refresh(obj)

    def _set_status(self, job: Job, status: JobStatus) -> None:
        if not can_transition(job.status, status):
            raise InvalidStatusTransitionError(f"Job {job.id}: {job.status} -> {status.value}")
        job.status = status.value

    async def create_job(self, user_id: str, input_type: str, input_content: str, title: Optional[str]) -> Job:
        job = Job(
            user_id=user_id,
            title=title or "New Job Analysis",
            input_type=input_type,
            input_content=input_content,
            status=JobStatus.QUEUED.value,
        )
        self.session.add(job)
        await self._commit(job)
        return job

    async def set_status(self, job: Job, status: JobStatus) -> Job:
        self._set_status(job, status)
        await self._commit(job)
        return job

    async def save_persona(self, job: Job, persona: Persona) -> AnalysisOutput:
        """Create the job's single AnalysisOutput row, or overwrite its persona."""
        analysis = await self.get_analysis(job.id)
        if analysis is None:
            analysis = AnalysisOutput(job_id=job.id, clarifying_questions=[], fit_reasoning=[])
            self.session.add(analysis)
        analysis.persona_analysis = _dump(persona)
        await self._commit(analysis)
        return analysis

    async def save_routing(self, job: Job, analysis: AnalysisOutput, routing: DomainRouting) -> None:
        job.domain = routing.primary_domain.value
        analysis.domain_routing = _dump(routing)
        await self._commit(job, analysis)

    async def reject(self, job: Job, analysis: AnalysisOutput, reason: str) -> None:
        self._set_status(job, JobStatus.REJECTED)
        analysis.rejection_reason = reason
        await self._commit(job, analysis)

    async def save_requirements(self, analysis: AnalysisOutput, matrix: RequirementsMatrix) -> None:
        data = _dump(matrix)
        analysis.requirements_matrix = data
        analysis.clarifying_questions = data["clarifyingQuestions"]
        await self._commit(analysis)

    async def complete(self, job: Job, analysis: AnalysisOutput, fit: FitDecision) -> None:
        self._set_status(job, JobStatus.COMPLETED)
        job.fit_score = fit.score
        analysis.fit_route = fit.route.value
        analysis.fit_reasoning = list(fit.reasoning)
        await self._commit(job, analysis)

    async def mark_failed(self, job_id: str) -> None:
        """Move a job to FAILED after a control-flow error; leaves finished jobs alone."""
        await self.session.rollback()
        job = await self.get_job(job_id)
        if job is None:
            return
        if not can_transition(job.status, JobStatus.FAILED):
            logger.warning(f"Job {job_id} is {job.status}; not marking FAILED")
            return
        job.status = JobStatus.FAILED.value
        await self._commit(job)

    async def save_proposal(self, job: Job, analysis: AnalysisOutput, text: str) -> None:
        self._set_status(job, JobStatus.PROPOSAL_READY)
        analysis.proposal_text = text
        await self._commit(job, analysis)

    async def save_refined(self, job: Job, analysis: AnalysisOutput, text: str) -> None:
        analysis.refined_proposal_text = text
        if job.status != JobStatus.FINISHED.value:
            self._set_status(job, JobStatus.FINISHED)
        await self._commit(job, analysis)
