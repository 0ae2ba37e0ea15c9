"""
Job Model - one submitted job description moving through the analysis pipeline

Status Flow:
    QUEUED → PROCESSING → COMPLETED → PROPOSAL_READY → FINISHED
                        ↘ REJECTED (eligibility gate)
    QUEUED/PROCESSING → FAILED (unhandled control-flow error)

Only the pipeline orchestrator and the proposal/critique services write the
status column; every write goes through can_transition().
"""

import uuid
from enum import Enum
from typing import Dict, FrozenSet

from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base


class InputType(str, Enum):
    URL = "URL"
    FILE = "FILE"
    TEXT = "TEXT"


class JobStatus(str, Enum):
    QUEUED = "QUEUED"
    PROCESSING = "PROCESSING"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    PROPOSAL_READY = "PROPOSAL_READY"
    FINISHED = "FINISHED"


ALLOWED_TRANSITIONS: Dict[JobStatus, FrozenSet[JobStatus]] = {
    JobStatus.QUEUED: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.PROCESSING: frozenset({JobStatus.REJECTED, JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset({JobStatus.PROPOSAL_READY}),
    JobStatus.PROPOSAL_READY: frozenset({JobStatus.FINISHED}),
    JobStatus.REJECTED: frozenset(),
    JobStatus.FAILED: frozenset(),
    JobStatus.FINISHED: frozenset(),
}

# Statuses after which the analysis pipeline never runs again
PIPELINE_TERMINAL = frozenset({
    JobStatus.COMPLETED,
    JobStatus.REJECTED,
    JobStatus.FAILED,
    JobStatus.PROPOSAL_READY,
    JobStatus.FINISHED,
})


def can_transition(current: str, target: str) -> bool:
    return JobStatus(target) in ALLOWED_TRANSITIONS[JobStatus(current)]


class Job(Base):
    """
    Submitted job description with its routing and fit results.

    Attributes:
        id: UUID primary key
        user_id: Submitting user
        title: Display title
        input_type: URL, FILE or TEXT
        input_content: Raw job description text
        domain: Routed primary domain (null until routed)
        status: Pipeline state (indexed)
        fit_score: Deterministic fit score 0-100 (null until scored)
    """

    __tablename__ = "jobs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(500), nullable=False, default="New Job Analysis")
    input_type = Column(String(10), nullable=False, default=InputType.TEXT.value)
    input_content = Column(Text, nullable=False)
    domain = Column(String(50), nullable=True)
    status = Column(String(20), nullable=False, default=JobStatus.QUEUED.value, index=True)
    fit_score = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
