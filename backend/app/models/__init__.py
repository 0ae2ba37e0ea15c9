from app.models.user import User, UserRole, ADMIN_DOMAIN
from app.models.job import Job, JobStatus, InputType
from app.models.analysis import AnalysisOutput
from app.models.resume import ResumeChunk
from app.models.history import History

__all__ = [
    "User",
    "UserRole",
    "ADMIN_DOMAIN",
    "Job",
    "JobStatus",
    "InputType",
    "AnalysisOutput",
    "ResumeChunk",
    "History",
]
