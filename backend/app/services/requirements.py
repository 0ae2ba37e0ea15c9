"""
Requirement Extraction - per-domain requirement matrices and their merge

RequirementExtractor asks the model for one domain's view of the job
(explicit/implied requirements, constraints, ambiguities, risks and
clarifying questions). A failed extraction yields an empty matrix so the
pipeline keeps going.

consolidate_matrices() merges N matrices: each of the five string sets is
the union of the inputs with exact-string duplicates removed; clarifying
questions are concatenated in extractor order without de-duplication.
"""

import json
import logging
from typing import List, Sequence

from app.middleware.metrics import record_stage_fallback
from app.schemas.analysis import (
    MATRIX_SETS,
    DomainRouting,
    Domain,
    Persona,
    RequirementsMatrix,
    empty_matrix,
)
from app.services.llm_gateway import LLMError, LLMGateway, parse_json_object

logger = logging.getLogger(__name__)

EXTRACTOR_PROMPT = """You are an Expert in {domain}.
Analyze this job from a {domain} perspective.

Client Persona: {persona}
Job Description:
\"\"\"{job_description}\"\"\"

Extract requirements into a structured matrix.
Return ONLY a JSON object:
{{
  "explicit": [string],
  "implied": [string],
  "constraints": [string],
  "ambiguities": [string],
  "risks": [string],
  "clarifyingQuestions": [{{"question": string, "type": "MUST_ASK" | "GOOD_TO_ASK"}}]
}}"""


class RequirementExtractor:
    def __init__(self, gateway: LLMGateway):
        self.gateway = gateway

    async def extract(self, job_description: str, persona: Persona, domain: Domain) -> RequirementsMatrix:
        prompt = EXTRACTOR_PROMPT.format(
            domain=Domain(domain).value,
            persona=json.dumps(persona.model_dump(by_alias=True, mode="json")),
            job_description=job_description,
        )
        try:
            raw = await self.gateway.generate_content(prompt, json_mode=True)
            return RequirementsMatrix.model_validate(parse_json_object(raw))
        except (LLMError, ValueError) as e:
            logger.warning(f"Requirement extraction ({Domain(domain).value}) failed, using empty matrix: {e}")
            record_stage_fallback("extractor")
            return empty_matrix()


def select_extraction_domains(routing: DomainRouting, min_confidence: float = 0.7) -> List[Domain]:
    """
    Primary domain always; the top secondary only when the router is
    confident enough (strictly above min_confidence) that it matters.
    """
    domains = [routing.primary_domain]
    if routing.secondary_domains and routing.confidence > min_confidence:
        domains.append(routing.secondary_domains[0])
    return domains


def consolidate_matrices(matrices: Sequence[RequirementsMatrix]) -> RequirementsMatrix:
    merged = {}
    for field in MATRIX_SETS:
        seen = {}
        for matrix in matrices:
            for value in getattr(matrix, field):
                seen.setdefault(value, None)
        merged[field] = list(seen)

    questions = [q for matrix in matrices for q in matrix.clarifying_questions]
    return RequirementsMatrix(clarifying_questions=questions, **merged)
