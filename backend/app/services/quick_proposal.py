"""
Quick Proposal - synchronous question-to-proposal flow behind /chat

    Persona → Domain Router → Eligibility Gate → Resume Retriever
            → Fit Scorer (empty matrix) → Proposal Synthesizer

There is no Job row; the answer (a proposal, a domain-mismatch explanation
or a "no resumes" notice) is saved to the user's history together with the
fit score (0 when no proposal was written).
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import History, User
from app.schemas.analysis import empty_matrix
from app.services.domain_router import DomainRouter
from app.services.eligibility import check_eligibility
from app.services.fit_scorer import score_fit
from app.services.llm_gateway import LLMGateway
from app.services.persona import PersonaAnalyzer
from app.services.proposal import ProposalSynthesizer
from app.services.resume_retriever import ResumeRetriever

logger = logging.getLogger(__name__)


def mismatch_answer(user_domain: str, job_domain: str, reason: str) -> str:
    return (
        "### Domain Mismatch\n\n"
        f"**Your Profile Domain**: {user_domain}\n"
        f"**Job Domain**: {job_domain}\n\n"
        f"{reason}\n\n"
        "**Recommendation**: Please switch to a profile that matches this job "
        "description or update your domain settings."
    )


def no_resumes_answer(user_domain: Optional[str] = None) -> str:
    scope = f" for the domain **{user_domain}**" if user_domain else ""
    return (
        f"### No Resumes Found{scope}\n\n"
        f"You haven't added any resumes yet{scope}. Please add a resume "
        "before generating a proposal."
    )


class QuickProposalService:
    def __init__(self, session: AsyncSession, gateway: LLMGateway, retriever: ResumeRetriever):
        self.session = session
        self.persona_analyzer = PersonaAnalyzer(gateway)
        self.router = DomainRouter(gateway)
        self.synthesizer = ProposalSynthesizer(gateway)
        self.retriever = retriever

    async def ask(self, user: User, question: str) -> History:
        """
        Answer a job description with a proposal and record it in history.

        Raises:
            LLMError: proposal generation failed; nothing is saved
        """
        answer, fit_score = await self._answer(user, question)

        entry = History(user_id=user.id, question=question, answer=answer, fit_score=fit_score)
        self.session.add(entry)
        await self.session.commit()
        await self.session.refresh(entry)
        return entry

    async def _answer(self, user: User, question: str) -> tuple:
        persona = await self.persona_analyzer.analyze(question)
        routing = await self.router.route(question, persona)

        gate = check_eligibility(routing.primary_domain.value, user.domain, user.has_domain_override)
        if not gate.passed:
            return mismatch_answer(gate.user_domain, gate.job_domain, gate.reason), 0

        chunks = await self.retriever.retrieve(question, user.id, user.domain, user.role)
        if not chunks:
            return no_resumes_answer(user.domain), 0

        matrix = empty_matrix()
        fit = score_fit(matrix, persona, routing)
        proposal = await self.synthesizer.synthesize(
            question,
            persona.model_dump(by_alias=True, mode="json"),
            matrix.model_dump(by_alias=True, mode="json"),
            chunks,
        )
        logger.info(f"Quick proposal for user {user.id}: score={fit.score} route={fit.route.value}")
        return proposal, fit.score
