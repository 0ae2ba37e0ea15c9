"""
AnalysisOutput Model - persisted stage outputs for a job (one row per job)

The row is created when the persona stage finishes and is afterwards only
updated through targeted field writes (matrix, fit, proposal, refinement).
Structured columns hold the camelCase JSON form of the stage schemas.
"""

import uuid

from sqlalchemy import Column, String, Text, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from app.database import Base


class AnalysisOutput(Base):
    __tablename__ = "analysis_outputs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    job_id = Column(String, ForeignKey("jobs.id"), nullable=False, unique=True, index=True)
    persona_analysis = Column(JSON, nullable=True)
    domain_routing = Column(JSON, nullable=True)
    requirements_matrix = Column(JSON, nullable=True)
    clarifying_questions = Column(JSON, nullable=False, default=list)
    fit_route = Column(String(20), nullable=True)
    fit_reasoning = Column(JSON, nullable=False, default=list)
    rejection_reason = Column(Text, nullable=True)
    proposal_text = Column(Text, nullable=True)
    refined_proposal_text = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
