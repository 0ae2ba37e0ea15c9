"""
Proposal Synthesis - writes the client-facing proposal for an analyzed job

ProposalSynthesizer turns (job description, persona, consolidated matrix,
retrieved resume chunks) into proposal text and runs it through
finalize_proposal(). Provider failures propagate as LLMError; unlike the
analysis stages there is no fallback text.

ProposalService is the job-level entry point:
    - a persisted proposal is returned as-is without calling the model
    - otherwise the job must be COMPLETED with an AnalysisOutput
    - the new text is persisted and the job moves to PROPOSAL_READY
"""

import json
import logging
from typing import Any, Dict, Optional, Sequence

from app.models import JobStatus, User
from app.services.errors import AnalysisNotReadyError
from app.services.job_store import JobStore
from app.services.llm_gateway import LLMGateway
from app.services.proposal_format import finalize_proposal
from app.services.resume_retriever import ResumeRetriever, RetrievedChunk

logger = logging.getLogger(__name__)

PROPOSAL_PROMPT = """You are a high-end consultant writing a tailored freelance proposal in the first person.

JOB DESCRIPTION:
\"\"\"{job_description}\"\"\"

CLIENT PERSONA:
{persona}

EXPERT ANALYSIS:
{matrix}

MY RELEVANT EXPERIENCE (RESUME CHUNKS):
{resume_context}

GUIDELINES:
- Open with a short greeting and a hook that addresses the client's specific problem.
- Adapt tone to the persona (technical vs non-technical, casual vs professional).
- Focus on the explicit requirements and on reducing the listed risks.
- Inject specific proof points from the resume context; never invent experience.
- Short jobs get short replies; complex jobs get full proposals.
- Only mention pricing if the client asked.
- Do NOT include placeholders like "[Your Name]" and do NOT repeat the analysis sections.
- End with a confident call to action and a sign-off.

Format output in Markdown. Start directly with the text."""


def format_resume_context(chunks: Sequence[RetrievedChunk]) -> str:
    if not chunks:
        return "(no resume material available)"
    return "\n\n---\n\n".join(
        f"DOMAIN: {chunk.domain or 'General'}\nCONTENT: {chunk.content}" for chunk in chunks
    )


class ProposalSynthesizer:
    def __init__(self, gateway: LLMGateway):
        self.gateway = gateway

    async def synthesize(
        self,
        job_description: str,
        persona: Optional[Dict[str, Any]],
        matrix: Optional[Dict[str, Any]],
        chunks: Sequence[RetrievedChunk],
    ) -> str:
        prompt = PROPOSAL_PROMPT.format(
            job_description=job_description,
            persona=json.dumps(persona or {}),
            matrix=json.dumps(matrix or {}),
            resume_context=format_resume_context(chunks),
        )
        raw = await self.gateway.generate_content(prompt)
        return finalize_proposal(raw)


class ProposalService:
    def __init__(self, store: JobStore, synthesizer: ProposalSynthesizer, retriever: ResumeRetriever):
        self.store = store
        self.synthesizer = synthesizer
        self.retriever = retriever

    async def get_or_create(self, job_id: str, user: User) -> str:
        """
        Return the job's proposal, generating it on first call.

        Raises:
            JobNotFoundError: unknown job or not the caller's
            AnalysisNotReadyError: analysis has not completed
            LLMError: generation failed; job status is unchanged
        """
        job = await self.store.get_owned_job(job_id, user.id)
        analysis = await self.store.get_analysis(job_id)

        if analysis is not None and analysis.proposal_text:
            return analysis.proposal_text

        if analysis is None or job.status != JobStatus.COMPLETED.value:
            raise AnalysisNotReadyError(f"Job {job_id} is {job.status}")

        chunks = await self.retriever.retrieve(job.input_content, user.id, user.domain, user.role)
        proposal = await self.synthesizer.synthesize(
            job.input_content,
            analysis.persona_analysis,
            analysis.requirements_matrix,
            chunks,
        )

        await self.store.save_proposal(job, analysis, proposal)
        logger.info(f"Proposal generated for job {job_id} from {len(chunks)} resume chunks")
        return proposal
