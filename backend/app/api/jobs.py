import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_gateway, get_job_store, get_retriever
from app.auth import get_current_user
from app.models import JobStatus, User
from app.schemas import (
    AnalysisResponse,
    CritiqueResponse,
    JobDetailResponse,
    JobResponse,
    JobSubmit,
    JobSubmitResponse,
    ProposalResponse,
)
from app.services.critic import CriticRefiner, CritiqueService
from app.services.errors import AnalysisNotReadyError, JobNotFoundError, ProposalNotReadyError
from app.services.job_store import JobStore
from app.services.llm_gateway import LLMError, LLMGateway
from app.services.proposal import ProposalService, ProposalSynthesizer
from app.services.resume_retriever import ResumeRetriever

logger = logging.getLogger(__name__)

router = APIRouter()

FAILED_MESSAGE = "Analysis failed. Please submit the job again."


@router.post("", response_model=JobSubmitResponse, status_code=status.HTTP_202_ACCEPTED)
async def submit_job(
    submission: JobSubmit,
    store: JobStore = Depends(get_job_store),
    user: User = Depends(get_current_user),
):
    job = await store.create_job(
        user.id,
        submission.input_type.value,
        submission.input_content,
        submission.title,
    )

    # Import here to avoid loading Celery for every router import
    from app.tasks.analysis import analyze_job

    try:
        # Broker publish blocks (and retries) while Redis is unreachable
        await asyncio.to_thread(analyze_job.delay, job.id)
    except Exception:
        logger.exception(f"Could not enqueue analysis for job {job.id}")
        await store.mark_failed(job.id)
        raise HTTPException(status_code=503, detail="Analysis queue unavailable")

    return JobSubmitResponse(id=job.id, status=job.status)


@router.get("", response_model=List[JobResponse])
async def list_jobs(
    store: JobStore = Depends(get_job_store),
    user: User = Depends(get_current_user),
):
    jobs = await store.list_jobs(user.id)
    return [JobResponse.model_validate(job) for job in jobs]


@router.get("/{job_id}", response_model=JobDetailResponse)
async def get_job(
    job_id: str,
    store: JobStore = Depends(get_job_store),
    user: User = Depends(get_current_user),
):
    try:
        job = await store.get_owned_job(job_id, user.id)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")

    analysis = await store.get_analysis(job_id)

    message = None
    if job.status == JobStatus.FAILED.value:
        message = FAILED_MESSAGE
    elif job.status == JobStatus.REJECTED.value and analysis is not None:
        message = analysis.rejection_reason

    detail = JobDetailResponse.model_validate(job)
    detail.message = message
    detail.analysis = AnalysisResponse.model_validate(analysis) if analysis else None
    return detail


@router.post("/{job_id}/proposal", response_model=ProposalResponse)
async def generate_proposal(
    job_id: str,
    store: JobStore = Depends(get_job_store),
    gateway: LLMGateway = Depends(get_gateway),
    retriever: ResumeRetriever = Depends(get_retriever),
    user: User = Depends(get_current_user),
):
    service = ProposalService(store, ProposalSynthesizer(gateway), retriever)
    try:
        proposal = await service.get_or_create(job_id, user)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")
    except AnalysisNotReadyError:
        raise HTTPException(status_code=409, detail="Analysis not completed. Run analysis first.")
    except LLMError as e:
        logger.error(f"Proposal generation failed for job {job_id}: {e}")
        raise HTTPException(status_code=502, detail="Proposal generation failed, please retry")

    return ProposalResponse(proposal=proposal)


@router.post("/{job_id}/critique", response_model=CritiqueResponse)
async def critique_proposal(
    job_id: str,
    store: JobStore = Depends(get_job_store),
    gateway: LLMGateway = Depends(get_gateway),
    user: User = Depends(get_current_user),
):
    service = CritiqueService(store, CriticRefiner(gateway))
    try:
        original, refined = await service.critique(job_id, user)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")
    except ProposalNotReadyError:
        raise HTTPException(status_code=409, detail="Generate a proposal first")

    return CritiqueResponse(original=original, refined=refined)
