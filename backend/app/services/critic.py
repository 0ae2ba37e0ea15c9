"""
Critic/Refiner - one editorial rewrite pass over a generated proposal

Refinement is best-effort: any LLMError returns the original text unchanged.
"""

import logging

from app.middleware.metrics import record_stage_fallback
from app.models import User
from app.services.errors import ProposalNotReadyError
from app.services.job_store import JobStore
from app.services.llm_gateway import LLMError, LLMGateway

logger = logging.getLogger(__name__)

CRITIC_PROMPT = """You are a Senior Copy Editor and freelance marketplace expert.
Refine the following proposal to make it more professional, persuasive, and concise.

JOB DESCRIPTION:
\"\"\"{job_description}\"\"\"

ORIGINAL PROPOSAL:
\"\"\"{proposal}\"\"\"

RULES:
- Keep it under 400 words.
- Strengthen the "hook" (the first sentence).
- Remove any "desperate" sounding language.
- Ensure logical flow and a clear call-to-action.
- Maintain the expert tone set in the original.

Return ONLY the refined proposal text in Markdown."""


class CriticRefiner:
    def __init__(self, gateway: LLMGateway):
        self.gateway = gateway

    async def refine(self, proposal: str, job_description: str) -> str:
        prompt = CRITIC_PROMPT.format(job_description=job_description, proposal=proposal)
        try:
            return await self.gateway.generate_content(prompt)
        except LLMError as e:
            logger.warning(f"Proposal refinement failed, returning original: {e}")
            record_stage_fallback("critic")
            return proposal


class CritiqueService:
    def __init__(self, store: JobStore, critic: CriticRefiner):
        self.store = store
        self.critic = critic

    async def critique(self, job_id: str, user: User) -> tuple:
        """
        Refine the job's proposal and persist the result.

        Returns:
            (original, refined)

        Raises:
            JobNotFoundError: unknown job or not the caller's
            ProposalNotReadyError: no proposal has been generated yet
        """
        job = await self.store.get_owned_job(job_id, user.id)
        analysis = await self.store.get_analysis(job_id)
        if analysis is None or not analysis.proposal_text:
            raise ProposalNotReadyError(f"Job {job_id} has no proposal")

        original = analysis.proposal_text
        refined = await self.critic.refine(original, job.input_content)
        await self.store.save_refined(job, analysis, refined)
        return original, refined
