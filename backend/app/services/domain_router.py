"""
Domain Router - assigns a job to one primary capability domain

The primary domain is always a member of the closed Domain set; secondary
domains are a subset of the same set without the primary, in the model's
own ranking order. On failure the router returns FALLBACK_ROUTING
(Fullstack, no secondaries, confidence 0.5) so the scorer sees a neutral
"routed but unreliable" prior.
"""

import json
import logging

from app.middleware.metrics import record_stage_fallback
from app.schemas.analysis import FALLBACK_ROUTING, Domain, DomainRouting, Persona
from app.services.llm_gateway import LLMError, LLMGateway, parse_json_object

logger = logging.getLogger(__name__)

DOMAIN_CHOICES = " | ".join(f'"{d.value}"' for d in Domain)

ROUTER_PROMPT = """You are a Senior Architect acting as a Router.
Route this freelance job to the best domain expert.

Client Persona: {persona}
Job Description:
\"\"\"{job_description}\"\"\"

Available Domains: {domains}.

Return ONLY a JSON object:
{{
  "primaryDomain": {domains},
  "secondaryDomains": [other relevant domains, most relevant first],
  "confidence": number between 0 and 1
}}"""


class DomainRouter:
    def __init__(self, gateway: LLMGateway):
        self.gateway = gateway

    async def route(self, job_description: str, persona: Persona) -> DomainRouting:
        prompt = ROUTER_PROMPT.format(
            persona=json.dumps(persona.model_dump(by_alias=True, mode="json")),
            job_description=job_description,
            domains=DOMAIN_CHOICES,
        )
        try:
            raw = await self.gateway.generate_content(prompt, json_mode=True)
            return DomainRouting.model_validate(parse_json_object(raw))
        except (LLMError, ValueError) as e:
            logger.warning(f"Domain routing failed, using fallback routing: {e}")
            record_stage_fallback("router")
            return FALLBACK_ROUTING
