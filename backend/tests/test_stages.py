"""
Tests for the analysis stages

Tests cover:
- Persona analysis and its fallback persona
- Domain routing, secondary-domain clean-up and fallback routing
- Requirement extraction and its empty-matrix fallback
- Extraction domain selection and matrix consolidation
- The eligibility gate
"""

import pytest

from app.schemas.analysis import (
    FALLBACK_PERSONA,
    FALLBACK_ROUTING,
    Domain,
    DomainRouting,
    Level,
    QuestionType,
    RequirementsMatrix,
    TechnicalLevel,
    Tone,
)
from app.services.domain_router import DomainRouter
from app.services.eligibility import check_eligibility
from app.services.llm_gateway import LLMError, LLMSafetyBlockError
from app.services.persona import PersonaAnalyzer
from app.services.requirements import (
    RequirementExtractor,
    consolidate_matrices,
    select_extraction_domains,
)

from conftest import DEFAULT_PERSONA, ScriptedGateway, matrix_payload


class TestPersonaAnalyzer:
    """Test persona inference and fallback."""

    @pytest.mark.asyncio
    async def test_parses_valid_persona(self):
        """Valid JSON should map onto the enum fields."""
        analyzer = PersonaAnalyzer(ScriptedGateway())

        persona = await analyzer.analyze("Need a React dashboard")

        assert persona.technical_level == TechnicalLevel.TECHNICAL
        assert persona.tone == Tone.PROFESSIONAL
        assert persona.urgency == Level.MEDIUM
        assert persona.has_budget is True
        assert persona.ambiguity_level == Level.LOW

    @pytest.mark.asyncio
    async def test_provider_error_returns_fallback(self):
        """A failed call should yield the documented fallback persona."""
        analyzer = PersonaAnalyzer(ScriptedGateway(persona=LLMError("timeout")))

        persona = await analyzer.analyze("anything")

        assert persona == FALLBACK_PERSONA
        assert persona.technical_level == TechnicalLevel.MIXED
        assert persona.tone == Tone.PROFESSIONAL
        assert persona.has_budget is False

    @pytest.mark.asyncio
    async def test_safety_block_returns_fallback(self):
        """Safety blocks are treated like any other stage failure."""
        analyzer = PersonaAnalyzer(ScriptedGateway(persona=LLMSafetyBlockError("blocked")))

        assert await analyzer.analyze("anything") == FALLBACK_PERSONA

    @pytest.mark.asyncio
    async def test_out_of_set_value_returns_fallback(self):
        """Values outside the enumerations must never leak through."""
        bad = dict(DEFAULT_PERSONA, tone="FRIENDLY")
        analyzer = PersonaAnalyzer(ScriptedGateway(persona=bad))

        assert await analyzer.analyze("anything") == FALLBACK_PERSONA

    @pytest.mark.asyncio
    async def test_unparseable_output_returns_fallback(self):
        """Non-JSON output should fall back rather than raise."""
        analyzer = PersonaAnalyzer(ScriptedGateway(persona="I think the client is technical"))

        assert await analyzer.analyze("anything") == FALLBACK_PERSONA

    @pytest.mark.asyncio
    async def test_code_fenced_json_is_accepted(self):
        """A Markdown code fence around the JSON is the one tolerated wrapper."""
        fenced = '```json\n{"technicalLevel": "NON_TECHNICAL", "tone": "CASUAL", "urgency": "HIGH", "hasBudget": false, "ambiguityLevel": "HIGH"}\n```'
        analyzer = PersonaAnalyzer(ScriptedGateway(persona=fenced))

        persona = await analyzer.analyze("anything")

        assert persona.technical_level == TechnicalLevel.NON_TECHNICAL
        assert persona.urgency == Level.HIGH


class TestDomainRouter:
    """Test domain routing."""

    @pytest.mark.asyncio
    async def test_routes_to_primary_domain(self):
        """Primary domain and confidence come from the model."""
        router = DomainRouter(ScriptedGateway(routing={
            "primaryDomain": "GenAI",
            "secondaryDomains": ["AI_ML"],
            "confidence": 0.8,
        }))

        routing = await router.route("Build a RAG chatbot", FALLBACK_PERSONA)

        assert routing.primary_domain == Domain.GENAI
        assert routing.secondary_domains == [Domain.AI_ML]
        assert routing.confidence == 0.8

    @pytest.mark.asyncio
    async def test_secondary_excludes_primary(self):
        """The primary domain is dropped from the secondaries."""
        router = DomainRouter(ScriptedGateway(routing={
            "primaryDomain": "Fullstack",
            "secondaryDomains": ["Fullstack", "DevOps", "DevOps"],
            "confidence": 0.9,
        }))

        routing = await router.route("job", FALLBACK_PERSONA)

        assert routing.secondary_domains == [Domain.DEVOPS]

    @pytest.mark.asyncio
    async def test_unknown_domain_returns_fallback(self):
        """Domains outside the closed set trigger the fallback."""
        router = DomainRouter(ScriptedGateway(routing={
            "primaryDomain": "Blockchain",
            "secondaryDomains": [],
            "confidence": 0.9,
        }))

        assert await router.route("job", FALLBACK_PERSONA) == FALLBACK_ROUTING

    @pytest.mark.asyncio
    async def test_provider_error_returns_fallback(self):
        """Failure yields Fullstack with confidence 0.5."""
        router = DomainRouter(ScriptedGateway(routing=LLMError("down")))

        routing = await router.route("job", FALLBACK_PERSONA)

        assert routing.primary_domain == Domain.FULLSTACK
        assert routing.secondary_domains == []
        assert routing.confidence == 0.5


class TestRequirementExtractor:
    """Test per-domain requirement extraction."""

    @pytest.mark.asyncio
    async def test_extracts_matrix(self):
        """A valid response becomes a RequirementsMatrix."""
        extractor = RequirementExtractor(ScriptedGateway())

        matrix = await extractor.extract("job", FALLBACK_PERSONA, Domain.FULLSTACK)

        assert matrix.explicit == ["React dashboard", "Node backend"]
        assert matrix.clarifying_questions[0].type == QuestionType.MUST_ASK

    @pytest.mark.asyncio
    async def test_prompt_names_domain(self):
        """The expert prompt is specialised by domain."""
        gateway = ScriptedGateway()
        extractor = RequirementExtractor(gateway)

        await extractor.extract("job", FALLBACK_PERSONA, Domain.DEVOPS)

        assert gateway.prompts[0].startswith("You are an Expert in DevOps.")

    @pytest.mark.asyncio
    async def test_failure_returns_empty_matrix(self):
        """A failed extraction yields an empty matrix."""
        extractor = RequirementExtractor(ScriptedGateway(matrices={"Fullstack": LLMError("boom")}))

        matrix = await extractor.extract("job", FALLBACK_PERSONA, Domain.FULLSTACK)

        assert matrix.explicit == []
        assert matrix.implied == []
        assert matrix.constraints == []
        assert matrix.ambiguities == []
        assert matrix.risks == []
        assert matrix.clarifying_questions == []

    @pytest.mark.asyncio
    async def test_wrong_shape_returns_empty_matrix(self):
        """A string where a list is expected is not reshaped."""
        bad = matrix_payload(explicit="React dashboard")
        extractor = RequirementExtractor(ScriptedGateway(matrices={"Fullstack": bad}))

        matrix = await extractor.extract("job", FALLBACK_PERSONA, Domain.FULLSTACK)

        assert matrix.explicit == []


class TestExtractionDomains:
    """Test which domains get an extractor."""

    def test_primary_only_without_secondaries(self):
        routing = DomainRouting(primary_domain=Domain.FULLSTACK, secondary_domains=[], confidence=0.95)
        assert select_extraction_domains(routing) == [Domain.FULLSTACK]

    def test_confident_secondary_added(self):
        """Top secondary is added above the confidence threshold."""
        routing = DomainRouting(
            primary_domain=Domain.GENAI,
            secondary_domains=[Domain.AI_ML, Domain.DEVOPS],
            confidence=0.8,
        )
        assert select_extraction_domains(routing) == [Domain.GENAI, Domain.AI_ML]

    def test_threshold_is_strict(self):
        """Confidence equal to the threshold does not add a secondary."""
        routing = DomainRouting(primary_domain=Domain.GENAI, secondary_domains=[Domain.AI_ML], confidence=0.7)
        assert select_extraction_domains(routing) == [Domain.GENAI]


class TestConsolidation:
    """Test merging of per-domain matrices."""

    def test_union_without_duplicates(self):
        """Each set is a duplicate-free union preserving first-seen order."""
        a = RequirementsMatrix.model_validate(matrix_payload(explicit=["React", "Node"], risks=["Scope creep"]))
        b = RequirementsMatrix.model_validate(matrix_payload(explicit=["Node", "Docker"], risks=["Scope creep"]))

        merged = consolidate_matrices([a, b])

        assert merged.explicit == ["React", "Node", "Docker"]
        assert merged.risks == ["Scope creep"]
        for field in ("explicit", "implied", "constraints", "ambiguities", "risks"):
            values = getattr(merged, field)
            assert len(values) == len(set(values))
            assert len(values) <= len(getattr(a, field)) + len(getattr(b, field))

    def test_questions_concatenated_in_order(self):
        """Clarifying questions are not de-duplicated."""
        a = RequirementsMatrix.model_validate(matrix_payload())
        b = RequirementsMatrix.model_validate(matrix_payload())

        merged = consolidate_matrices([a, b])

        assert [q.question for q in merged.clarifying_questions] == ["Which charts?", "Which charts?"]

    def test_single_matrix_unchanged(self):
        a = RequirementsMatrix.model_validate(matrix_payload())
        assert consolidate_matrices([a]) == a


class TestEligibilityGate:
    """Test the hard domain filter."""

    def test_matching_domain_passes(self):
        assert check_eligibility("Fullstack", "Fullstack").passed

    def test_no_user_domain_passes(self):
        assert check_eligibility("DevOps", None).passed

    def test_override_passes(self):
        assert check_eligibility("DevOps", "Fullstack", has_override=True).passed

    def test_mismatch_names_both_domains(self):
        """The rejection reason names the routed and the configured domain."""
        result = check_eligibility("Fullstack", "AI_ML")

        assert not result.passed
        assert result.job_domain == "Fullstack"
        assert "Fullstack" in result.reason
        assert "AI_ML" in result.reason
