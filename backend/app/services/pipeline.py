"""
Analysis Pipeline - runs one job through every analysis stage

Stage order:
    PROCESSING → Persona → Domain Router → Eligibility Gate
               → Requirement Extractors (concurrent) → Consolidator
               → Fit Scorer → COMPLETED

Each stage's output is committed before the next stage starts. A gate
failure ends the run as REJECTED with the persona, routing and reason
persisted. Stage failures are absorbed by the stages' own fallbacks; any
other exception marks the job FAILED and propagates to the task runner.

The fit route is advisory: a REJECT route is persisted alongside a
COMPLETED status and the job stays eligible for proposal generation.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from app.middleware.metrics import record_pipeline_outcome
from app.models import JobStatus
from app.models.job import PIPELINE_TERMINAL
from app.schemas.analysis import FitDecision
from app.services.domain_router import DomainRouter
from app.services.eligibility import check_eligibility
from app.services.errors import JobNotFoundError
from app.services.fit_scorer import score_fit
from app.services.job_store import JobStore
from app.services.llm_gateway import LLMGateway
from app.services.persona import PersonaAnalyzer
from app.services.requirements import (
    RequirementExtractor,
    consolidate_matrices,
    select_extraction_domains,
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    job_id: str
    status: JobStatus
    domain: Optional[str] = None
    fit: Optional[FitDecision] = None
    rejection_reason: Optional[str] = None
    extraction_domains: List[str] = field(default_factory=list)
    skipped: bool = False


class AnalysisPipeline:
    """
    Attributes:
        store: JobStore bound to this run's database session
        persona_analyzer / router / extractor: stage services sharing one gateway
        secondary_min_confidence: router confidence above which the top
            secondary domain gets its own extractor
    """

    def __init__(
        self,
        store: JobStore,
        gateway: LLMGateway,
        secondary_min_confidence: float = 0.7,
    ):
        self.store = store
        self.persona_analyzer = PersonaAnalyzer(gateway)
        self.router = DomainRouter(gateway)
        self.extractor = RequirementExtractor(gateway)
        self.secondary_min_confidence = secondary_min_confidence

    async def run(self, job_id: str) -> PipelineResult:
        start = time.perf_counter()
        try:
            result = await self._run(job_id)
        except Exception:
            logger.exception(f"Analysis pipeline failed for job {job_id}")
            try:
                await self.store.mark_failed(job_id)
            except Exception:
                logger.exception(f"Could not mark job {job_id} as FAILED")
            record_pipeline_outcome(JobStatus.FAILED.value, time.perf_counter() - start)
            raise

        if not result.skipped:
            record_pipeline_outcome(result.status.value, time.perf_counter() - start)
        return result

    async def _run(self, job_id: str) -> PipelineResult:
        job = await self.store.get_job(job_id)
        if job is None:
            raise JobNotFoundError(job_id)

        # Redelivered task for a job that already finished its analysis
        if JobStatus(job.status) in PIPELINE_TERMINAL:
            logger.warning(f"Job {job_id} is already {job.status}; skipping analysis")
            return PipelineResult(
                job_id=job_id,
                status=JobStatus(job.status),
                domain=job.domain,
                skipped=True,
            )

        await self.store.set_status(job, JobStatus.PROCESSING)
        description = job.input_content
        logger.info(f"Analyzing job {job_id}")

        persona = await self.persona_analyzer.analyze(description)
        analysis = await self.store.save_persona(job, persona)

        routing = await self.router.route(description, persona)
        await self.store.save_routing(job, analysis, routing)
        primary = routing.primary_domain.value

        user = await self.store.get_user(job.user_id)
        gate = check_eligibility(
            primary,
            user.domain if user else None,
            has_override=user.has_domain_override if user else False,
        )
        if not gate.passed:
            logger.info(f"Job {job_id} rejected by eligibility gate: {gate.reason}")
            await self.store.reject(job, analysis, gate.reason)
            return PipelineResult(
                job_id=job_id,
                status=JobStatus.REJECTED,
                domain=primary,
                rejection_reason=gate.reason,
            )

        domains = select_extraction_domains(routing, self.secondary_min_confidence)
        matrices = await asyncio.gather(
            *(self.extractor.extract(description, persona, domain) for domain in domains)
        )
        matrix = consolidate_matrices(matrices)
        await self.store.save_requirements(analysis, matrix)

        fit = score_fit(matrix, persona, routing)
        await self.store.complete(job, analysis, fit)
        logger.info(f"Job {job_id} completed: score={fit.score} route={fit.route.value}")

        return PipelineResult(
            job_id=job_id,
            status=JobStatus.COMPLETED,
            domain=primary,
            fit=fit,
            extraction_domains=[d.value for d in domains],
        )
