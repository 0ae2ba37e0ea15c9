"""
Stage Schemas - typed outputs of the job-analysis pipeline stages

Each LLM-backed stage validates the model's JSON against one of these
schemas; anything that does not validate triggers the stage fallback.
Field aliases are the camelCase keys the prompts ask for and the shape
persisted on AnalysisOutput.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator, model_validator


class TechnicalLevel(str, Enum):
    TECHNICAL = "TECHNICAL"
    NON_TECHNICAL = "NON_TECHNICAL"
    MIXED = "MIXED"


class Tone(str, Enum):
    CASUAL = "CASUAL"
    PROFESSIONAL = "PROFESSIONAL"
    URGENT = "URGENT"
    STRICT = "STRICT"


class Level(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Domain(str, Enum):
    FULLSTACK = "Fullstack"
    GENAI = "GenAI"
    AI_ML = "AI_ML"
    DEVOPS = "DevOps"


DEFAULT_DOMAIN = Domain.FULLSTACK


class QuestionType(str, Enum):
    MUST_ASK = "MUST_ASK"
    GOOD_TO_ASK = "GOOD_TO_ASK"


class FitRoute(str, Enum):
    PROCEED = "PROCEED"
    BORDERLINE = "BORDERLINE"
    REJECT = "REJECT"


def _unique(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


class Persona(BaseModel):
    technical_level: TechnicalLevel = Field(alias="technicalLevel")
    tone: Tone
    urgency: Level
    has_budget: bool = Field(alias="hasBudget")
    ambiguity_level: Level = Field(alias="ambiguityLevel")

    class Config:
        populate_by_name = True
        frozen = True


FALLBACK_PERSONA = Persona(
    technical_level=TechnicalLevel.MIXED,
    tone=Tone.PROFESSIONAL,
    urgency=Level.MEDIUM,
    has_budget=False,
    ambiguity_level=Level.MEDIUM,
)


class DomainRouting(BaseModel):
    primary_domain: Domain = Field(alias="primaryDomain")
    secondary_domains: List[Domain] = Field(default_factory=list, alias="secondaryDomains")
    confidence: float = Field(ge=0.0, le=1.0)

    class Config:
        populate_by_name = True
        frozen = True

    @model_validator(mode="after")
    def _drop_primary_from_secondary(self) -> "DomainRouting":
        # Normalization: keep model order, drop repeats and the primary itself
        cleaned = [d for d in _unique(self.secondary_domains) if d != self.primary_domain]
        object.__setattr__(self, "secondary_domains", cleaned)
        return self


FALLBACK_ROUTING = DomainRouting(
    primary_domain=DEFAULT_DOMAIN,
    secondary_domains=[],
    confidence=0.5,
)


class ClarifyingQuestion(BaseModel):
    question: str = Field(min_length=1)
    type: QuestionType


class RequirementsMatrix(BaseModel):
    explicit: List[str] = Field(default_factory=list)
    implied: List[str] = Field(default_factory=list)
    constraints: List[str] = Field(default_factory=list)
    ambiguities: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)
    clarifying_questions: List[ClarifyingQuestion] = Field(
        default_factory=list, alias="clarifyingQuestions"
    )

    class Config:
        populate_by_name = True

    @field_validator("explicit", "implied", "constraints", "ambiguities", "risks")
    @classmethod
    def _as_set(cls, values: List[str]) -> List[str]:
        return _unique(values)


MATRIX_SETS = ("explicit", "implied", "constraints", "ambiguities", "risks")


def empty_matrix() -> RequirementsMatrix:
    return RequirementsMatrix()


class FitDecision(BaseModel):
    score: int = Field(ge=0, le=100)
    route: FitRoute
    reasoning: List[str]
