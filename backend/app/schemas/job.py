from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Optional

from app.models.job import InputType


class JobSubmit(BaseModel):
    input_type: InputType = Field(alias="inputType")
    input_content: str = Field(alias="inputContent", min_length=1)
    title: Optional[str] = None

    class Config:
        populate_by_name = True


class JobSubmitResponse(BaseModel):
    id: str
    status: str


class JobResponse(BaseModel):
    id: str
    title: str
    input_type: str
    input_content: str
    domain: Optional[str] = None
    status: str
    fit_score: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AnalysisResponse(BaseModel):
    persona_analysis: Optional[dict[str, Any]] = None
    domain_routing: Optional[dict[str, Any]] = None
    requirements_matrix: Optional[dict[str, Any]] = None
    clarifying_questions: list[dict[str, Any]] = []
    fit_route: Optional[str] = None
    fit_reasoning: list[str] = []
    rejection_reason: Optional[str] = None
    proposal_text: Optional[str] = None
    refined_proposal_text: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JobDetailResponse(JobResponse):
    message: Optional[str] = None
    analysis: Optional[AnalysisResponse] = None


class ProposalResponse(BaseModel):
    proposal: str


class CritiqueResponse(BaseModel):
    original: str
    refined: str
