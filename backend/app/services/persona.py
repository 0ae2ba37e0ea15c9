"""
Persona Analyzer - infers client traits from a job description

Output is a Persona drawn entirely from fixed enumerations. Any provider,
parse or validation failure returns FALLBACK_PERSONA
(MIXED / PROFESSIONAL / MEDIUM / no budget / MEDIUM) instead of raising.
"""

import logging

from app.middleware.metrics import record_stage_fallback
from app.schemas.analysis import FALLBACK_PERSONA, Persona
from app.services.llm_gateway import LLMError, LLMGateway, parse_json_object

logger = logging.getLogger(__name__)

PERSONA_PROMPT = """You are an expert at analyzing freelance marketplace client personas.
Analyze the following job description and extract the client's persona.

Job Description:
\"\"\"{job_description}\"\"\"

Return ONLY a JSON object with this structure:
{{
  "technicalLevel": "TECHNICAL" | "NON_TECHNICAL" | "MIXED",
  "tone": "CASUAL" | "PROFESSIONAL" | "URGENT" | "STRICT",
  "urgency": "LOW" | "MEDIUM" | "HIGH",
  "hasBudget": true | false,
  "ambiguityLevel": "LOW" | "MEDIUM" | "HIGH"
}}"""


class PersonaAnalyzer:
    def __init__(self, gateway: LLMGateway):
        self.gateway = gateway

    async def analyze(self, job_description: str) -> Persona:
        prompt = PERSONA_PROMPT.format(job_description=job_description)
        try:
            raw = await self.gateway.generate_content(prompt, json_mode=True)
            return Persona.model_validate(parse_json_object(raw))
        except (LLMError, ValueError) as e:
            logger.warning(f"Persona analysis failed, using fallback persona: {e}")
            record_stage_fallback("persona")
            return FALLBACK_PERSONA
