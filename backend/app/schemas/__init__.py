from app.schemas.job import (
    JobSubmit,
    JobSubmitResponse,
    JobResponse,
    JobDetailResponse,
    AnalysisResponse,
    ProposalResponse,
    CritiqueResponse,
)
from app.schemas.resume import ResumeCreate, ResumeGenerate, ResumeUpdate, ResumeResponse
from app.schemas.history import ChatRequest, HistoryResponse
from app.schemas.analysis import (
    Persona,
    DomainRouting,
    RequirementsMatrix,
    ClarifyingQuestion,
    FitDecision,
)

__all__ = [
    "JobSubmit",
    "JobSubmitResponse",
    "JobResponse",
    "JobDetailResponse",
    "AnalysisResponse",
    "ProposalResponse",
    "CritiqueResponse",
    "ResumeCreate",
    "ResumeGenerate",
    "ResumeUpdate",
    "ResumeResponse",
    "ChatRequest",
    "HistoryResponse",
    "Persona",
    "DomainRouting",
    "RequirementsMatrix",
    "ClarifyingQuestion",
    "FitDecision",
]
